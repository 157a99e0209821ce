"""Tenant context value object for resolved tenant identification.

This module contains the pure value object that represents a resolved
tenant context, together with the enumerations it is built from. It is
framework-agnostic and contains no business logic, making it safe for the
shared kernel.

The actual resolution logic (Host header parsing, tenant directory lookup,
subscription checks) lives in the IAM bounded context.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import Literal
from uuid import UUID

DEFAULT_TENANT_ID = UUID("00000000-0000-0000-0000-000000000001")
"""Well-known tenant ID used for every request in self-hosted deployments."""


class DeploymentMode(StrEnum):
    """How the application is deployed.

    SAAS serves many tenants from subdomains and requires isolation.
    SELF_HOSTED serves a single implicit tenant; isolation is moot.
    """

    SAAS = "saas"
    SELF_HOSTED = "selfhosted"


class SubscriptionTier(IntEnum):
    """Subscription tier of a tenant, ordered FREE < PRO < ENTERPRISE.

    FREE: core features, no payment processing.
    PRO: payment features enabled.
    ENTERPRISE: PRO plus branding features.
    """

    FREE = 0
    PRO = 1
    ENTERPRISE = 2


@dataclass(frozen=True)
class TenantContext:
    """Resolved tenant context for the current request.

    Created once per request by the tenant resolution middleware and
    read-only afterwards.

    Attributes:
        tenant_id: The resolved tenant identifier.
        deployment_mode: The process-wide deployment mode.
        subscription_tier: The tenant's tier (always ENTERPRISE when self-hosted).
        source: How the tenant was resolved - 'subdomain' if looked up from the
            Host header, 'self_hosted' if it is the fixed default tenant.
    """

    tenant_id: UUID
    deployment_mode: DeploymentMode
    subscription_tier: SubscriptionTier
    source: Literal["subdomain", "self_hosted"]

    @classmethod
    def for_saas(
        cls, tenant_id: UUID, subscription_tier: SubscriptionTier
    ) -> TenantContext:
        """Create a context for a tenant resolved from its subdomain."""
        return cls(
            tenant_id=tenant_id,
            deployment_mode=DeploymentMode.SAAS,
            subscription_tier=subscription_tier,
            source="subdomain",
        )

    @classmethod
    def for_self_hosted(cls, tenant_id: UUID | None = None) -> TenantContext:
        """Create the constant self-hosted context with all features enabled."""
        return cls(
            tenant_id=tenant_id or DEFAULT_TENANT_ID,
            deployment_mode=DeploymentMode.SELF_HOSTED,
            subscription_tier=SubscriptionTier.ENTERPRISE,
            source="self_hosted",
        )

    @property
    def is_self_hosted(self) -> bool:
        return self.deployment_mode is DeploymentMode.SELF_HOSTED

    @property
    def is_saas(self) -> bool:
        return self.deployment_mode is DeploymentMode.SAAS

    @property
    def has_payment_features(self) -> bool:
        """Whether the tenant may use payment features (PRO and above)."""
        return self.is_self_hosted or self.subscription_tier >= SubscriptionTier.PRO

    @property
    def has_branding_features(self) -> bool:
        """Whether the tenant may use branding features (ENTERPRISE only)."""
        return (
            self.is_self_hosted
            or self.subscription_tier >= SubscriptionTier.ENTERPRISE
        )
