"""Pydantic models for tenant API responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from shared_kernel.middleware.tenant_context import TenantContext


class TenantContextResponse(BaseModel):
    """The tenant the current request runs under and what it may use."""

    tenant_id: str = Field(..., description="Tenant ID (UUID)")
    deployment_mode: str = Field(..., description="saas or selfhosted")
    subscription_tier: str = Field(..., description="FREE, PRO or ENTERPRISE")
    source: str = Field(..., description="How the tenant was resolved")
    has_payment_features: bool
    has_branding_features: bool

    @classmethod
    def from_context(cls, context: TenantContext) -> TenantContextResponse:
        return cls(
            tenant_id=str(context.tenant_id),
            deployment_mode=context.deployment_mode.value,
            subscription_tier=context.subscription_tier.name,
            source=context.source,
            has_payment_features=context.has_payment_features,
            has_branding_features=context.has_branding_features,
        )
