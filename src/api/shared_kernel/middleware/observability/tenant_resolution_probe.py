"""Probe for resolving the tenant of a request from its Host header.

Each request produces one of these events, so the log shows which
organization a request was served for, or why it was turned away.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shared_kernel.observability_context import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantResolutionProbe(Protocol):
    """Domain probe for tenant resolution operations."""

    def resolver_initialized(self, deployment_mode: str, base_domain: str) -> None:
        """Record the configuration the resolution stage started with."""
        ...

    def tenant_resolved_from_subdomain(
        self,
        tenant_id: str,
        subdomain: str,
    ) -> None:
        """Record that a tenant was resolved from the Host header subdomain."""
        ...

    def self_hosted_tenant_applied(self, tenant_id: str) -> None:
        """Record that the fixed self-hosted tenant was applied."""
        ...

    def no_subdomain(self, host: str) -> None:
        """Record that the request addressed no tenant subdomain."""
        ...

    def tenant_not_found(self, subdomain: str) -> None:
        """Record that no active tenant exists for the subdomain."""
        ...

    def subscription_cancelled(self, tenant_id: str, subdomain: str) -> None:
        """Record that the tenant's subscription is cancelled."""
        ...

    def with_context(self, context: ObservationContext) -> TenantResolutionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantResolutionProbe(StructlogProbe):
    """Logs resolution outcomes; refusals at warning, the rest at debug."""

    def resolver_initialized(self, deployment_mode: str, base_domain: str) -> None:
        self._emit(
            "info",
            "tenant_resolution_initialized",
            deployment_mode=deployment_mode,
            base_domain=base_domain,
        )

    def tenant_resolved_from_subdomain(self, tenant_id: str, subdomain: str) -> None:
        self._emit(
            "debug",
            "tenant_resolved_from_subdomain",
            tenant_id=tenant_id,
            subdomain=subdomain,
        )

    def self_hosted_tenant_applied(self, tenant_id: str) -> None:
        self._emit("debug", "tenant_self_hosted_applied", tenant_id=tenant_id)

    def no_subdomain(self, host: str) -> None:
        self._emit("debug", "tenant_no_subdomain", host=host)

    def tenant_not_found(self, subdomain: str) -> None:
        self._emit("warning", "tenant_not_found", subdomain=subdomain)

    def subscription_cancelled(self, tenant_id: str, subdomain: str) -> None:
        self._emit(
            "warning",
            "tenant_subscription_cancelled",
            tenant_id=tenant_id,
            subdomain=subdomain,
        )
