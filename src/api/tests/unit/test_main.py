"""Unit tests for main FastAPI application configuration.

Tenancy configuration is validated when the application is built, so a
misconfigured deployment fails before serving any request.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI

from iam.infrastructure.user_tenant_cache import UserTenantCache
from iam.presentation import TenantResolutionMiddleware
from infrastructure.settings import (
    ConfigurationError,
    DatabaseSettings,
    TenancySettings,
)
from main import create_app


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "REGISTRAR_TENANCY_DEPLOYMENT_MODE",
        "REGISTRAR_TENANCY_BASE_DOMAIN",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir("/")


@pytest.fixture
def database_settings() -> DatabaseSettings:
    return DatabaseSettings(url="sqlite+aiosqlite:///:memory:")


class TestCreateApp:
    """Tests for the application factory."""

    def test_builds_app_from_explicit_settings(self, database_settings):
        tenancy = TenancySettings(deployment_mode="saas", base_domain="ruffregistrar.com")

        app = create_app(tenancy_settings=tenancy, database_settings=database_settings)

        assert isinstance(app, FastAPI)
        assert app.state.tenancy_settings is tenancy

    def test_tenant_resolution_middleware_is_installed(self, database_settings):
        app = create_app(
            tenancy_settings=TenancySettings(deployment_mode="selfhosted"),
            database_settings=database_settings,
        )

        assert any(m.cls is TenantResolutionMiddleware for m in app.user_middleware)

    def test_membership_cache_uses_configured_ttl(self, database_settings):
        app = create_app(
            tenancy_settings=TenancySettings(
                deployment_mode="selfhosted", membership_cache_ttl_seconds=60
            ),
            database_settings=database_settings,
        )

        cache = app.state.user_tenant_cache
        assert isinstance(cache, UserTenantCache)
        assert cache.enabled

    def test_routes_are_registered(self, database_settings):
        app = create_app(
            tenancy_settings=TenancySettings(deployment_mode="selfhosted"),
            database_settings=database_settings,
        )

        paths = {route.path for route in app.routes}
        assert {"/health", "/tenant", "/students"} <= paths

    def test_missing_deployment_mode_is_fatal(self, database_settings):
        with pytest.raises(ConfigurationError):
            create_app(database_settings=database_settings)

    def test_unknown_deployment_mode_is_fatal(self, monkeypatch, database_settings):
        monkeypatch.setenv("REGISTRAR_TENANCY_DEPLOYMENT_MODE", "hybrid")

        with pytest.raises(ConfigurationError):
            create_app(database_settings=database_settings)

    def test_saas_without_base_domain_is_fatal(self, monkeypatch, database_settings):
        monkeypatch.setenv("REGISTRAR_TENANCY_DEPLOYMENT_MODE", "saas")

        with pytest.raises(ConfigurationError):
            create_app(database_settings=database_settings)
