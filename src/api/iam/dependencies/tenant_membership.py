"""Tenant membership FastAPI dependencies and named authorization policies.

Routes protect themselves with a named policy:

    @router.get("/students", dependencies=[Depends(require_policy("TenantMember"))])
    async def list_students(...): ...

The "TenantMember" policy requires an authenticated principal that belongs
to the tenant the request resolved to. Denials are opaque to the client.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import (
    DefaultTenantMembershipProbe,
    TenantMembershipProbe,
)
from iam.application.services import TenantMembershipService
from iam.application.value_objects import (
    AuthenticatedPrincipal,
    MembershipDecision,
    MembershipOutcome,
)
from iam.dependencies.authentication import (
    get_current_principal,
    get_optional_principal,
)
from iam.dependencies.tenant_context import get_tenant_context
from iam.infrastructure.user_repository import UserRepository
from iam.infrastructure.user_tenant_cache import UserTenantCache
from iam.ports.exceptions import TenantMembershipDeniedError
from infrastructure.database.dependencies import get_read_session
from shared_kernel.middleware.tenant_context import TenantContext

FORBIDDEN_DETAIL = "Forbidden"


def get_user_tenant_cache(request: Request) -> UserTenantCache:
    """Return the application's membership cache, created at startup."""
    return request.app.state.user_tenant_cache


def get_tenant_membership_probe() -> TenantMembershipProbe:
    return DefaultTenantMembershipProbe()


def get_tenant_membership_service(
    session: Annotated[AsyncSession, Depends(get_read_session)],
    cache: Annotated[UserTenantCache, Depends(get_user_tenant_cache)],
    probe: Annotated[TenantMembershipProbe, Depends(get_tenant_membership_probe)],
) -> TenantMembershipService:
    return TenantMembershipService(
        home_tenant_lookup=UserRepository(session).get_tenant_id_by_subject,
        cache=cache,
        probe=probe,
    )


async def require_tenant_member(
    context: Annotated[TenantContext | None, Depends(get_tenant_context)],
    principal: Annotated[
        AuthenticatedPrincipal | None, Depends(get_optional_principal)
    ],
    service: Annotated[
        TenantMembershipService, Depends(get_tenant_membership_service)
    ],
) -> MembershipDecision:
    """Allow the request only if its principal belongs to the resolved tenant.

    Raises:
        HTTPException 401: If the check needs a principal and there is none
        HTTPException 403: If the principal is unknown or from another tenant
    """
    decision = await service.check(context, principal)

    if decision.outcome is MembershipOutcome.UNAUTHENTICATED:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        decision.raise_if_denied()
    except TenantMembershipDeniedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=FORBIDDEN_DETAIL,
        ) from e
    return decision


async def _tenant_member_policy(
    principal: Annotated[AuthenticatedPrincipal, Depends(get_current_principal)],
    decision: Annotated[MembershipDecision, Depends(require_tenant_member)],
) -> MembershipDecision:
    return decision


async def _authenticated_policy(
    principal: Annotated[AuthenticatedPrincipal, Depends(get_current_principal)],
) -> AuthenticatedPrincipal:
    return principal


POLICIES: dict[str, Callable[..., Any]] = {
    "Authenticated": _authenticated_policy,
    "TenantMember": _tenant_member_policy,
}


def require_policy(name: str) -> Callable[..., Any]:
    """Look up a named authorization policy for use with Depends().

    Raises:
        KeyError: If no policy is registered under the name
    """
    try:
        return POLICIES[name]
    except KeyError:
        raise KeyError(f"Unknown authorization policy: {name}") from None
