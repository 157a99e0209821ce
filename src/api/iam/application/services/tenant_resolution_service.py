"""Tenant resolution for incoming requests.

Maps a request's Host header to the TenantContext it runs under. In SaaS
deployments the subdomain is looked up in the tenant directory; a
self-hosted deployment always runs as its single default tenant.

Resolution outcomes:
    self-hosted                      -> TenantContext.for_self_hosted()
    saas, no tenant subdomain        -> None (no tenant context)
    saas, unknown/inactive subdomain -> TenantNotFoundError
    saas, cancelled subscription     -> SubscriptionCancelledError
    saas, active tenant              -> TenantContext.for_saas(...)
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from iam.ports.exceptions import SubscriptionCancelledError, TenantNotFoundError
from iam.ports.repositories import ITenantRepository
from shared_kernel.middleware.observability import (
    DefaultTenantResolutionProbe,
    TenantResolutionProbe,
)
from shared_kernel.middleware.subdomain import extract_subdomain
from shared_kernel.middleware.tenant_context import DeploymentMode, TenantContext

TenantDirectoryScope = Callable[[], AbstractAsyncContextManager[ITenantRepository]]
"""Opens a read-only tenant repository for the duration of one lookup."""


class TenantResolver:
    """Resolves the tenant context of a request from its Host header.

    Never writes: lookups go through a tenant directory scope backed by the
    read session factory.
    """

    def __init__(
        self,
        deployment_mode: DeploymentMode,
        base_domain: str,
        tenant_directory: TenantDirectoryScope,
        probe: TenantResolutionProbe | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            deployment_mode: Process-wide deployment mode
            base_domain: Domain tenant subdomains live under (SaaS only)
            tenant_directory: Factory opening a tenant repository scope
            probe: Optional domain probe for observability
        """
        self._deployment_mode = deployment_mode
        self._base_domain = base_domain
        self._tenant_directory = tenant_directory
        self._probe = probe or DefaultTenantResolutionProbe()
        self._probe.resolver_initialized(deployment_mode.value, base_domain)

    @property
    def deployment_mode(self) -> DeploymentMode:
        return self._deployment_mode

    async def resolve(self, host: str | None) -> TenantContext | None:
        """Resolve the tenant context for a Host header value.

        Args:
            host: Raw Host header, possibly with a port, or None

        Returns:
            The resolved context, or None when the request addresses no tenant

        Raises:
            TenantNotFoundError: If no active tenant owns the subdomain
            SubscriptionCancelledError: If the tenant's subscription is cancelled
        """
        if self._deployment_mode is DeploymentMode.SELF_HOSTED:
            context = TenantContext.for_self_hosted()
            self._probe.self_hosted_tenant_applied(str(context.tenant_id))
            return context

        subdomain = extract_subdomain(host, self._base_domain)
        if subdomain is None:
            self._probe.no_subdomain(host or "")
            return None

        return await self.resolve_subdomain(subdomain)

    async def resolve_subdomain(self, subdomain: str) -> TenantContext:
        """Look up an already-extracted subdomain in the tenant directory.

        Raises:
            TenantNotFoundError: If no active tenant owns the subdomain
            SubscriptionCancelledError: If the tenant's subscription is cancelled
        """
        async with self._tenant_directory() as tenants:
            tenant = await tenants.get_active_by_subdomain(subdomain)

        if tenant is None:
            self._probe.tenant_not_found(subdomain)
            raise TenantNotFoundError(subdomain)

        if tenant.is_cancelled:
            self._probe.subscription_cancelled(str(tenant.id), subdomain)
            raise SubscriptionCancelledError(subdomain, str(tenant.id))

        self._probe.tenant_resolved_from_subdomain(str(tenant.id), subdomain)
        return TenantContext.for_saas(tenant.id.value, tenant.subscription_tier)
