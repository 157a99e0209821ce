"""Unit test fixtures with mocked dependencies."""

from uuid import UUID

import pytest

from shared_kernel.middleware.context_propagator import TenantContextAccessor
from shared_kernel.middleware.tenant_context import SubscriptionTier, TenantContext

ACME_TENANT_ID = UUID("11111111-1111-1111-1111-111111111111")
GLOBEX_TENANT_ID = UUID("22222222-2222-2222-2222-222222222222")


@pytest.fixture
def mock_db_settings():
    """Provide test database settings."""
    from infrastructure.settings import DatabaseSettings

    return DatabaseSettings(
        host="testhost",
        port=5432,
        database="testdb",
        username="testuser",
        password="testpass",
    )


@pytest.fixture
def saas_tenancy_settings():
    """Provide SaaS tenancy settings."""
    from infrastructure.settings import TenancySettings

    return TenancySettings(deployment_mode="saas", base_domain="ruffregistrar.com")


@pytest.fixture
def accessor() -> TenantContextAccessor:
    """Provide an accessor isolated from the process-wide one."""
    return TenantContextAccessor(name="test_tenant_context")


@pytest.fixture
def acme_context() -> TenantContext:
    return TenantContext.for_saas(ACME_TENANT_ID, SubscriptionTier.PRO)


@pytest.fixture
def globex_context() -> TenantContext:
    return TenantContext.for_saas(GLOBEX_TENANT_ID, SubscriptionTier.FREE)
