"""Integration test fixtures for database tests.

These run against a throwaway SQLite database (aiosqlite) created per test
under pytest's tmp_path, with the real tenant-filtered session class.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Imported for their side effect of registering tables on Base.metadata
import iam.infrastructure.models  # noqa: F401
import registrar.infrastructure.models  # noqa: F401
from infrastructure.database.models import Base
from infrastructure.database.tenant_filter import (
    INCLUDE_ALL_TENANTS,
    TenantFilterPolicy,
    build_session_class,
)
from shared_kernel.middleware.context_propagator import TenantContextAccessor
from shared_kernel.middleware.tenant_context import SubscriptionTier, TenantContext

ACME_TENANT_ID = UUID("11111111-1111-1111-1111-111111111111")
GLOBEX_TENANT_ID = UUID("22222222-2222-2222-2222-222222222222")


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'registrar.db'}"


@pytest_asyncio.fixture
async def engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Provide an engine on a freshly created schema."""
    engine = create_async_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def accessor() -> TenantContextAccessor:
    return TenantContextAccessor(name="integration_tenant_context")


@pytest.fixture
def acme_context() -> TenantContext:
    return TenantContext.for_saas(ACME_TENANT_ID, SubscriptionTier.PRO)


@pytest.fixture
def globex_context() -> TenantContext:
    return TenantContext.for_saas(GLOBEX_TENANT_ID, SubscriptionTier.FREE)


def make_sessionmaker(
    engine: AsyncEngine,
    policy: TenantFilterPolicy,
    accessor: TenantContextAccessor,
) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
        class_=AsyncSession,
        sync_session_class=build_session_class(policy, accessor=accessor),
    )


@pytest.fixture
def saas_sessionmaker(engine, accessor) -> async_sessionmaker[AsyncSession]:
    """Sessions with tenant filtering enforced."""
    return make_sessionmaker(engine, TenantFilterPolicy(enabled=True), accessor)


@pytest.fixture
def selfhosted_sessionmaker(engine, accessor) -> async_sessionmaker[AsyncSession]:
    """Sessions with tenant filtering disabled."""
    return make_sessionmaker(engine, TenantFilterPolicy(enabled=False), accessor)


@pytest.fixture
def seed(saas_sessionmaker):
    """Insert rows across tenants, bypassing the row filter."""

    async def _seed(*models) -> None:
        async with saas_sessionmaker(info={INCLUDE_ALL_TENANTS: True}) as session:
            async with session.begin():
                session.add_all(models)

    return _seed
