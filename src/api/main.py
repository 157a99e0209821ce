"""Main FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from iam.dependencies.tenant_context import build_tenant_resolver
from iam.infrastructure.user_tenant_cache import UserTenantCache
from iam.presentation import TenantResolutionMiddleware
from iam.presentation import router as iam_router
from infrastructure.database.dependencies import (
    close_database_connections,
    init_database,
)
from infrastructure.database.tenant_filter import TenantFilterPolicy
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import (
    DatabaseSettings,
    TenancySettings,
    get_database_settings,
    get_settings,
    load_tenancy_settings,
)
from infrastructure.version import __version__
from registrar.presentation import router as registrar_router


def create_app(
    tenancy_settings: TenancySettings | None = None,
    database_settings: DatabaseSettings | None = None,
) -> FastAPI:
    """Build the application.

    Tenancy configuration is validated here, before anything is served:
    a missing or invalid deployment mode is fatal.

    Args:
        tenancy_settings: Tenancy settings (loaded from the environment by default)
        database_settings: Database settings (loaded from the environment by default)

    Raises:
        ConfigurationError: If the tenancy configuration is missing or invalid
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    tenancy = tenancy_settings or load_tenancy_settings()
    database = database_settings or get_database_settings()
    policy = TenantFilterPolicy.from_deployment_mode(tenancy.deployment_mode)
    probe = DefaultStartupProbe()

    @asynccontextmanager
    async def registrar_lifespan(app: FastAPI):
        """Application lifespan context.

        Manages:
        - Engines and tenant-filtered session factories
        - Connection pool disposal on shutdown
        """
        probe.application_starting(
            __version__, tenancy.deployment_mode.value, tenancy.base_domain
        )
        init_database(database, policy)
        probe.tenant_isolation_configured(policy.enabled)

        yield

        await close_database_connections()
        probe.application_stopped()

    app = FastAPI(
        title=settings.app_name,
        description="Student registrar with per-organization tenant isolation",
        version=__version__,
        debug=settings.debug,
        lifespan=registrar_lifespan,
    )
    app.state.tenancy_settings = tenancy
    app.state.user_tenant_cache = UserTenantCache(
        ttl_seconds=tenancy.membership_cache_ttl_seconds
    )

    # Added last so it wraps everything else and runs before routing
    app.add_middleware(
        TenantResolutionMiddleware,
        resolver=build_tenant_resolver(tenancy),
    )

    app.include_router(iam_router)
    app.include_router(registrar_router)

    @app.get("/health")
    def health():
        """Basic health check endpoint."""
        return {"status": "ok"}

    return app
