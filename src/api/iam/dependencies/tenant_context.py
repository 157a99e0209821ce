"""Tenant context FastAPI dependencies.

The tenant context is resolved by TenantResolutionMiddleware before routing;
these dependencies only read it back for handlers, and compose the tenant
resolver the middleware is built with.

Usage in FastAPI routes:
    @router.get("/example")
    async def example(
        tenant: Annotated[TenantContext, Depends(require_tenant_context)],
    ):
        ...
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, status

from iam.application.services import TenantResolver
from iam.infrastructure.tenant_repository import TenantRepository
from iam.ports.repositories import ITenantRepository
from infrastructure.database.dependencies import get_read_sessionmaker
from shared_kernel.middleware.context_propagator import (
    TenantContextAccessor,
    get_tenant_context_accessor,
)
from shared_kernel.middleware.observability import DefaultTenantResolutionProbe
from shared_kernel.middleware.tenant_context import TenantContext

if TYPE_CHECKING:
    from infrastructure.settings import TenancySettings


def get_tenant_context(
    accessor: Annotated[TenantContextAccessor, Depends(get_tenant_context_accessor)],
) -> TenantContext | None:
    """Return the current request's tenant context, or None if it has none."""
    return accessor.get()


def require_tenant_context(
    context: Annotated[TenantContext | None, Depends(get_tenant_context)],
) -> TenantContext:
    """Require that the request addresses a tenant.

    Raises:
        HTTPException 400: If the request was not addressed to a tenant subdomain
    """
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request does not address an organization",
        )
    return context


@asynccontextmanager
async def open_tenant_directory() -> AsyncIterator[ITenantRepository]:
    """Open a tenant repository on a read-only session for one lookup."""
    async with get_read_sessionmaker()() as session:
        yield TenantRepository(session)


def build_tenant_resolver(settings: TenancySettings) -> TenantResolver:
    """Compose the resolver used by TenantResolutionMiddleware."""
    return TenantResolver(
        deployment_mode=settings.deployment_mode,
        base_domain=settings.base_domain,
        tenant_directory=open_tenant_directory,
        probe=DefaultTenantResolutionProbe(),
    )
