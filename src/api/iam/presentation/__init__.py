"""IAM presentation layer - aggregate-based organization.

Organizes presentation concerns by domain aggregate following vertical
slicing. The tenant resolution middleware lives beside the routers because
it is the IAM context's entry point for every request.
"""

from __future__ import annotations

from fastapi import APIRouter

from iam.presentation import tenants
from iam.presentation.middleware import TenantResolutionMiddleware

router = APIRouter()
router.include_router(tenants.router)

__all__ = ["TenantResolutionMiddleware", "router"]
