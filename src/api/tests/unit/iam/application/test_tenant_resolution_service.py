"""Unit tests for TenantResolver.

The tenant directory is an AsyncMock repository opened through an
async context manager, mirroring the read-session scope used in production.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from iam.application.services import TenantResolver
from iam.domain.aggregates import Tenant
from iam.domain.value_objects import SubscriptionStatus
from iam.ports.exceptions import SubscriptionCancelledError, TenantNotFoundError
from shared_kernel.middleware.observability import TenantResolutionProbe
from shared_kernel.middleware.tenant_context import (
    DEFAULT_TENANT_ID,
    DeploymentMode,
    SubscriptionTier,
    TenantContext,
)

BASE_DOMAIN = "ruffregistrar.com"


@pytest.fixture
def tenant() -> Tenant:
    tenant = Tenant.create(
        name="Acme Academy",
        subdomain="acme",
        identity_realm="acme",
        admin_email="registrar@acme.test",
        subscription_tier=SubscriptionTier.PRO,
    )
    tenant.subscription_status = SubscriptionStatus.ACTIVE
    return tenant


@pytest.fixture
def mock_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_active_by_subdomain.return_value = None
    return repo


@pytest.fixture
def scopes_opened() -> list[int]:
    return []


@pytest.fixture
def tenant_directory(mock_repo: AsyncMock, scopes_opened: list[int]):
    @asynccontextmanager
    async def open_directory():
        scopes_opened.append(1)
        yield mock_repo

    return open_directory


@pytest.fixture
def mock_probe() -> MagicMock:
    return MagicMock(spec=TenantResolutionProbe)


@pytest.fixture
def saas_resolver(tenant_directory, mock_probe) -> TenantResolver:
    return TenantResolver(
        deployment_mode=DeploymentMode.SAAS,
        base_domain=BASE_DOMAIN,
        tenant_directory=tenant_directory,
        probe=mock_probe,
    )


class TestSelfHostedResolution:
    """Tests for self-hosted deployments."""

    @pytest.mark.asyncio
    async def test_always_resolves_default_tenant(
        self, tenant_directory, mock_repo, mock_probe, scopes_opened
    ) -> None:
        """Every request runs as the default tenant; nothing is looked up."""
        resolver = TenantResolver(
            deployment_mode=DeploymentMode.SELF_HOSTED,
            base_domain="",
            tenant_directory=tenant_directory,
            probe=mock_probe,
        )

        for host in ["acme.ruffregistrar.com", "localhost:8000", None]:
            context = await resolver.resolve(host)
            assert context == TenantContext.for_self_hosted()

        assert scopes_opened == []
        mock_repo.get_active_by_subdomain.assert_not_called()
        mock_probe.self_hosted_tenant_applied.assert_called_with(str(DEFAULT_TENANT_ID))


class TestSaasResolution:
    """Tests for SaaS deployments."""

    @pytest.mark.asyncio
    async def test_resolves_active_tenant(
        self, saas_resolver, mock_repo, mock_probe, tenant
    ) -> None:
        mock_repo.get_active_by_subdomain.return_value = tenant

        context = await saas_resolver.resolve("acme.ruffregistrar.com:443")

        assert context == TenantContext.for_saas(tenant.id.value, SubscriptionTier.PRO)
        mock_repo.get_active_by_subdomain.assert_awaited_once_with("acme")
        mock_probe.tenant_resolved_from_subdomain.assert_called_once_with(
            str(tenant.id), "acme"
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "host",
        [None, "", "ruffregistrar.com", "localhost:3000", "www.ruffregistrar.com"],
    )
    async def test_no_subdomain_resolves_to_none(
        self, saas_resolver, mock_repo, scopes_opened, host
    ) -> None:
        """Hosts that address no tenant continue without a context."""
        assert await saas_resolver.resolve(host) is None
        assert scopes_opened == []
        mock_repo.get_active_by_subdomain.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_subdomain_raises_not_found(
        self, saas_resolver, mock_probe
    ) -> None:
        with pytest.raises(TenantNotFoundError) as exc_info:
            await saas_resolver.resolve("ghost.ruffregistrar.com")

        assert exc_info.value.subdomain == "ghost"
        mock_probe.tenant_not_found.assert_called_once_with("ghost")

    @pytest.mark.asyncio
    async def test_cancelled_subscription_raises(
        self, saas_resolver, mock_repo, mock_probe, tenant
    ) -> None:
        tenant.subscription_status = SubscriptionStatus.CANCELLED
        mock_repo.get_active_by_subdomain.return_value = tenant

        with pytest.raises(SubscriptionCancelledError) as exc_info:
            await saas_resolver.resolve("acme.ruffregistrar.com")

        assert exc_info.value.subdomain == "acme"
        assert exc_info.value.tenant_id == str(tenant.id)
        mock_probe.subscription_cancelled.assert_called_once_with(str(tenant.id), "acme")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status", [SubscriptionStatus.PAST_DUE, SubscriptionStatus.TRIALING]
    )
    async def test_non_cancelled_statuses_resolve(
        self, saas_resolver, mock_repo, tenant, status
    ) -> None:
        tenant.subscription_status = status
        mock_repo.get_active_by_subdomain.return_value = tenant

        context = await saas_resolver.resolve("acme.ruffregistrar.com")

        assert context is not None
        assert context.tenant_id == tenant.id.value

    @pytest.mark.asyncio
    async def test_each_lookup_opens_its_own_scope(
        self, saas_resolver, mock_repo, scopes_opened, tenant
    ) -> None:
        mock_repo.get_active_by_subdomain.return_value = tenant

        await saas_resolver.resolve("acme.ruffregistrar.com")
        await saas_resolver.resolve("acme.ruffregistrar.com")

        assert len(scopes_opened) == 2

    @pytest.mark.asyncio
    async def test_resolver_never_writes(self, saas_resolver, mock_repo, tenant) -> None:
        mock_repo.get_active_by_subdomain.return_value = tenant

        await saas_resolver.resolve("acme.ruffregistrar.com")

        mock_repo.save.assert_not_called()


class TestResolverInitialization:
    def test_records_configuration(self, tenant_directory, mock_probe) -> None:
        resolver = TenantResolver(
            deployment_mode=DeploymentMode.SAAS,
            base_domain=BASE_DOMAIN,
            tenant_directory=tenant_directory,
            probe=mock_probe,
        )

        assert resolver.deployment_mode is DeploymentMode.SAAS
        mock_probe.resolver_initialized.assert_called_once_with("saas", BASE_DOMAIN)
