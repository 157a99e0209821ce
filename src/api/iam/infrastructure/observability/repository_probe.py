"""Probes for the tenant directory and the user store.

Lookups that miss are logged at debug: a miss is an expected answer here,
and the caller decides whether it becomes a 404 or a 403.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shared_kernel.observability_context import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantRepositoryProbe(Protocol):
    """Domain probe for tenant repository operations."""

    def tenant_saved(self, tenant_id: str) -> None:
        """Record that a tenant was successfully saved."""
        ...

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        ...

    def tenant_not_found(self, lookup: str, value: str) -> None:
        """Record that a tenant lookup found nothing."""
        ...

    def duplicate_subdomain(self, subdomain: str) -> None:
        """Record that a duplicate subdomain was detected."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRepositoryProbe(StructlogProbe):
    def tenant_saved(self, tenant_id: str) -> None:
        self._emit("info", "tenant_saved", tenant_id=tenant_id)

    def tenant_retrieved(self, tenant_id: str) -> None:
        self._emit("debug", "tenant_retrieved", tenant_id=tenant_id)

    def tenant_not_found(self, lookup: str, value: str) -> None:
        self._emit("debug", "tenant_lookup_missed", lookup=lookup, value=value)

    def duplicate_subdomain(self, subdomain: str) -> None:
        self._emit("warning", "duplicate_tenant_subdomain", subdomain=subdomain)


class UserRepositoryProbe(Protocol):
    """Domain probe for user repository operations."""

    def user_saved(self, user_id: str, tenant_id: str) -> None:
        """Record that a user was successfully saved."""
        ...

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user was retrieved."""
        ...

    def user_not_found(self, external_id: str) -> None:
        """Record that no user has the given subject."""
        ...

    def home_tenant_looked_up(self, external_id: str, tenant_id: str) -> None:
        """Record a cross-tenant lookup of a subject's home tenant."""
        ...

    def with_context(self, context: ObservationContext) -> UserRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserRepositoryProbe(StructlogProbe):
    # user_tenant_id, not tenant_id: the bound context owns tenant_id
    def user_saved(self, user_id: str, tenant_id: str) -> None:
        self._emit("info", "user_saved", user_id=user_id, user_tenant_id=tenant_id)

    def user_retrieved(self, user_id: str) -> None:
        self._emit("debug", "user_retrieved", user_id=user_id)

    def user_not_found(self, external_id: str) -> None:
        self._emit("debug", "user_not_found", external_id=external_id)

    def home_tenant_looked_up(self, external_id: str, tenant_id: str) -> None:
        self._emit(
            "debug",
            "user_home_tenant_looked_up",
            external_id=external_id,
            user_tenant_id=tenant_id,
        )
