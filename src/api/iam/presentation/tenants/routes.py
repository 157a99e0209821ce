"""HTTP routes for the current tenant."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from iam.dependencies.tenant_context import require_tenant_context
from iam.dependencies.tenant_membership import require_policy
from iam.presentation.tenants.models import TenantContextResponse
from shared_kernel.middleware.tenant_context import TenantContext

router = APIRouter(
    prefix="/tenant",
    tags=["tenant"],
)


@router.get("", dependencies=[Depends(require_policy("TenantMember"))])
async def get_current_tenant(
    context: Annotated[TenantContext, Depends(require_tenant_context)],
) -> TenantContextResponse:
    """Describe the tenant the request resolved to and its capabilities.

    Raises:
        HTTPException: 400 if the request does not address a tenant
        HTTPException: 401/403 from the TenantMember policy
    """
    return TenantContextResponse.from_context(context)
