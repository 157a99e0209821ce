"""Unit tests for the tenant filter policy and session class factory."""

from uuid import uuid4

from sqlalchemy.orm import Session

from infrastructure.database.tenant_filter import (
    TenantFilterPolicy,
    build_session_class,
)
from shared_kernel.middleware.tenant_context import (
    DeploymentMode,
    SubscriptionTier,
    TenantContext,
)


class TestTenantFilterPolicy:
    """Tests for the row predicate evaluated in Python."""

    def test_enabled_only_in_saas(self):
        assert TenantFilterPolicy.from_deployment_mode(DeploymentMode.SAAS).enabled
        assert not TenantFilterPolicy.from_deployment_mode(
            DeploymentMode.SELF_HOSTED
        ).enabled

    def test_disabled_allows_every_row(self):
        policy = TenantFilterPolicy(enabled=False)

        assert policy.allows(uuid4(), None)
        assert policy.allows(None, None)

    def test_enabled_without_context_allows_nothing(self):
        """Fail closed: no context means no rows, never all of them."""
        policy = TenantFilterPolicy(enabled=True)

        assert not policy.allows(uuid4(), None)

    def test_enabled_allows_only_own_rows(self):
        policy = TenantFilterPolicy(enabled=True)
        context = TenantContext.for_saas(uuid4(), SubscriptionTier.FREE)

        assert policy.allows(context.tenant_id, context)
        assert not policy.allows(uuid4(), context)
        assert not policy.allows(None, context)


class TestBuildSessionClass:
    """Tests for the Session subclass factory."""

    def test_returns_distinct_session_subclasses(self):
        policy = TenantFilterPolicy(enabled=True)

        first = build_session_class(policy)
        second = build_session_class(policy)

        assert issubclass(first, Session)
        assert first is not second
        assert first.tenant_filter_policy is policy
