"""Probe for the tenant membership check.

Records each decision on whether an authenticated principal belongs to the
tenant its request resolved to. Denials are logged at warning level with
both tenant ids.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shared_kernel.observability_context import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantMembershipProbe(Protocol):
    """Domain probe for tenant membership decisions."""

    def membership_confirmed(self, subject: str, tenant_id: str) -> None:
        """Record that the principal belongs to the request's tenant."""
        ...

    def membership_skipped(self, reason: str) -> None:
        """Record that no membership check was needed (no context, self-hosted)."""
        ...

    def principal_missing(self) -> None:
        """Record a tenant-scoped request without an authenticated principal."""
        ...

    def user_not_found(self, subject: str, tenant_id: str) -> None:
        """Record that the principal has no user record in any tenant."""
        ...

    def tenant_mismatch(
        self, subject: str, user_tenant_id: str, request_tenant_id: str
    ) -> None:
        """Record an attempt to access a tenant the principal does not belong to."""
        ...

    def cache_hit(self, subject: str) -> None:
        """Record that the principal's home tenant was served from cache."""
        ...

    def with_context(self, context: ObservationContext) -> TenantMembershipProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantMembershipProbe(StructlogProbe):
    def membership_confirmed(self, subject: str, tenant_id: str) -> None:
        self._emit(
            "debug", "tenant_membership_confirmed", subject=subject, tenant_id=tenant_id
        )

    def membership_skipped(self, reason: str) -> None:
        self._emit("debug", "tenant_membership_skipped", reason=reason)

    def principal_missing(self) -> None:
        self._emit("warning", "tenant_membership_denied", reason="unauthenticated")

    def user_not_found(self, subject: str, tenant_id: str) -> None:
        self._emit(
            "warning",
            "tenant_membership_denied",
            reason="user_not_found",
            subject=subject,
            request_tenant_id=tenant_id,
        )

    def tenant_mismatch(
        self, subject: str, user_tenant_id: str, request_tenant_id: str
    ) -> None:
        self._emit(
            "warning",
            "tenant_membership_denied",
            reason="tenant_mismatch",
            subject=subject,
            user_tenant_id=user_tenant_id,
            request_tenant_id=request_tenant_id,
        )

    def cache_hit(self, subject: str) -> None:
        self._emit("debug", "tenant_membership_cache_hit", subject=subject)
