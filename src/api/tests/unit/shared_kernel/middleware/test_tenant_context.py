"""Unit tests for the TenantContext shared value object.

Tests the pure value object from the shared kernel, its constructors for
the two deployment modes and the capability flags derived from the tier.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from shared_kernel.middleware.tenant_context import (
    DEFAULT_TENANT_ID,
    DeploymentMode,
    SubscriptionTier,
    TenantContext,
)


class TestTenantContext:
    """Tests for the TenantContext value object."""

    def test_tenant_context_is_immutable(self) -> None:
        """TenantContext should be a frozen dataclass."""
        context = TenantContext.for_saas(uuid4(), SubscriptionTier.FREE)
        with pytest.raises(AttributeError):
            context.tenant_id = uuid4()  # type: ignore[misc]

    def test_for_saas_records_subdomain_source(self) -> None:
        """A SaaS context comes from a subdomain lookup."""
        tenant_id = uuid4()
        context = TenantContext.for_saas(tenant_id, SubscriptionTier.PRO)

        assert context.tenant_id == tenant_id
        assert context.deployment_mode is DeploymentMode.SAAS
        assert context.subscription_tier is SubscriptionTier.PRO
        assert context.source == "subdomain"
        assert context.is_saas
        assert not context.is_self_hosted

    def test_for_self_hosted_uses_default_tenant(self) -> None:
        """The self-hosted context is constant: default tenant, all features."""
        context = TenantContext.for_self_hosted()

        assert context.tenant_id == DEFAULT_TENANT_ID
        assert context.deployment_mode is DeploymentMode.SELF_HOSTED
        assert context.subscription_tier is SubscriptionTier.ENTERPRISE
        assert context.source == "self_hosted"
        assert context.is_self_hosted

    def test_for_self_hosted_accepts_explicit_tenant(self) -> None:
        tenant_id = uuid4()
        assert TenantContext.for_self_hosted(tenant_id).tenant_id == tenant_id

    def test_tenant_context_equality(self) -> None:
        """Two TenantContext instances with same values should be equal."""
        tenant_id = uuid4()
        a = TenantContext.for_saas(tenant_id, SubscriptionTier.FREE)
        b = TenantContext.for_saas(tenant_id, SubscriptionTier.FREE)
        assert a == b
        assert hash(a) == hash(b)

    def test_tenant_context_inequality(self) -> None:
        """Contexts for different tiers of the same tenant differ."""
        tenant_id = uuid4()
        a = TenantContext.for_saas(tenant_id, SubscriptionTier.FREE)
        b = TenantContext.for_saas(tenant_id, SubscriptionTier.PRO)
        assert a != b


class TestSubscriptionTier:
    """Tests for tier ordering."""

    def test_tiers_are_ordered(self) -> None:
        assert SubscriptionTier.FREE < SubscriptionTier.PRO < SubscriptionTier.ENTERPRISE


class TestCapabilityFlags:
    """Tests for the features a context unlocks."""

    @pytest.mark.parametrize(
        ("tier", "payments", "branding"),
        [
            (SubscriptionTier.FREE, False, False),
            (SubscriptionTier.PRO, True, False),
            (SubscriptionTier.ENTERPRISE, True, True),
        ],
    )
    def test_saas_features_follow_tier(
        self, tier: SubscriptionTier, payments: bool, branding: bool
    ) -> None:
        context = TenantContext.for_saas(uuid4(), tier)

        assert context.has_payment_features is payments
        assert context.has_branding_features is branding

    def test_self_hosted_has_every_feature(self) -> None:
        context = TenantContext.for_self_hosted()

        assert context.has_payment_features
        assert context.has_branding_features


class TestDeploymentMode:
    """Tests for the deployment mode enumeration."""

    def test_values(self) -> None:
        assert DeploymentMode("saas") is DeploymentMode.SAAS
        assert DeploymentMode("selfhosted") is DeploymentMode.SELF_HOSTED

    def test_unknown_value_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            DeploymentMode("hybrid")
