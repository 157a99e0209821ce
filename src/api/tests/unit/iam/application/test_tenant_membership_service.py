"""Unit tests for the tenant membership check.

Covers the decision rules in decide_membership() and the service wrapping
them with a cached cross-tenant lookup of the principal's home tenant.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from iam.application.observability import TenantMembershipProbe
from iam.application.services import TenantMembershipService, decide_membership
from iam.application.value_objects import AuthenticatedPrincipal, MembershipOutcome
from iam.domain.value_objects import TenantId
from iam.infrastructure.user_tenant_cache import UserTenantCache
from iam.ports.exceptions import TenantMembershipDeniedError
from shared_kernel.middleware.tenant_context import SubscriptionTier, TenantContext

ALICE = AuthenticatedPrincipal(subject="kc-alice", username="alice")


@pytest.fixture
def acme_id() -> TenantId:
    return TenantId.generate()


@pytest.fixture
def context(acme_id: TenantId) -> TenantContext:
    return TenantContext.for_saas(acme_id.value, SubscriptionTier.FREE)


@pytest.fixture
def lookup() -> AsyncMock:
    return AsyncMock(return_value=None)


@pytest.fixture
def mock_probe() -> MagicMock:
    return MagicMock(spec=TenantMembershipProbe)


@pytest.fixture
def cache() -> UserTenantCache:
    return UserTenantCache(ttl_seconds=300)


@pytest.fixture
def service(lookup, cache, mock_probe) -> TenantMembershipService:
    return TenantMembershipService(home_tenant_lookup=lookup, cache=cache, probe=mock_probe)


class TestDecideMembership:
    """Tests for the pure decision rules, in order."""

    def test_no_context_allows(self) -> None:
        decision = decide_membership(None, None, None)

        assert decision.allowed
        assert decision.outcome is MembershipOutcome.NO_TENANT_CONTEXT

    def test_self_hosted_allows_without_principal(self) -> None:
        decision = decide_membership(TenantContext.for_self_hosted(), None, None)

        assert decision.allowed
        assert decision.outcome is MembershipOutcome.SELF_HOSTED

    def test_missing_principal_denies(self, context) -> None:
        decision = decide_membership(context, None, None)

        assert not decision.allowed
        assert decision.outcome is MembershipOutcome.UNAUTHENTICATED

    def test_unknown_user_denies(self, context) -> None:
        decision = decide_membership(context, ALICE, None)

        assert not decision.allowed
        assert decision.outcome is MembershipOutcome.USER_NOT_FOUND

    def test_other_tenant_denies(self, context) -> None:
        other = TenantId.generate()

        decision = decide_membership(context, ALICE, other)

        assert not decision.allowed
        assert decision.outcome is MembershipOutcome.TENANT_MISMATCH
        assert decision.user_tenant_id == str(other)

    def test_member_allows(self, context, acme_id) -> None:
        decision = decide_membership(context, ALICE, acme_id)

        assert decision.allowed
        assert decision.outcome is MembershipOutcome.MEMBER

    def test_denial_raises_with_outcome_as_reason(self, context) -> None:
        decision = decide_membership(context, ALICE, TenantId.generate())

        with pytest.raises(TenantMembershipDeniedError) as exc_info:
            decision.raise_if_denied()

        assert exc_info.value.reason == "tenant_mismatch"

    def test_allowed_decision_does_not_raise(self, context, acme_id) -> None:
        decide_membership(context, ALICE, acme_id).raise_if_denied()


class TestTenantMembershipService:
    """Tests for TenantMembershipService.check()."""

    @pytest.mark.asyncio
    async def test_member_is_allowed(
        self, service, lookup, mock_probe, context, acme_id
    ) -> None:
        lookup.return_value = acme_id

        decision = await service.check(context, ALICE)

        assert decision.allowed
        lookup.assert_awaited_once_with("kc-alice")
        mock_probe.membership_confirmed.assert_called_once_with(
            "kc-alice", str(acme_id)
        )

    @pytest.mark.asyncio
    async def test_mismatch_is_denied_and_logged(
        self, service, lookup, mock_probe, context, acme_id
    ) -> None:
        """A valid user of tenant B calling tenant A is denied and audited."""
        home = TenantId.generate()
        lookup.return_value = home

        decision = await service.check(context, ALICE)

        assert decision.outcome is MembershipOutcome.TENANT_MISMATCH
        mock_probe.tenant_mismatch.assert_called_once_with(
            "kc-alice", str(home), str(acme_id)
        )

    @pytest.mark.asyncio
    async def test_unknown_user_is_denied_and_logged(
        self, service, mock_probe, context, acme_id
    ) -> None:
        decision = await service.check(context, ALICE)

        assert decision.outcome is MembershipOutcome.USER_NOT_FOUND
        mock_probe.user_not_found.assert_called_once_with("kc-alice", str(acme_id))

    @pytest.mark.asyncio
    async def test_missing_principal_skips_lookup(
        self, service, lookup, mock_probe, context
    ) -> None:
        decision = await service.check(context, None)

        assert decision.outcome is MembershipOutcome.UNAUTHENTICATED
        lookup.assert_not_called()
        mock_probe.principal_missing.assert_called_once()

    @pytest.mark.asyncio
    async def test_no_context_skips_lookup(self, service, lookup, mock_probe) -> None:
        decision = await service.check(None, ALICE)

        assert decision.allowed
        lookup.assert_not_called()
        mock_probe.membership_skipped.assert_called_once_with("no_tenant_context")

    @pytest.mark.asyncio
    async def test_self_hosted_skips_lookup(self, service, lookup) -> None:
        decision = await service.check(TenantContext.for_self_hosted(), None)

        assert decision.outcome is MembershipOutcome.SELF_HOSTED
        lookup.assert_not_called()


class TestMembershipCaching:
    """Tests for caching of the home tenant lookup."""

    @pytest.mark.asyncio
    async def test_positive_lookup_is_cached(
        self, service, lookup, mock_probe, context, acme_id
    ) -> None:
        lookup.return_value = acme_id

        await service.check(context, ALICE)
        decision = await service.check(context, ALICE)

        assert decision.allowed
        lookup.assert_awaited_once()
        mock_probe.cache_hit.assert_called_once_with("kc-alice")

    @pytest.mark.asyncio
    async def test_negative_lookup_is_not_cached(
        self, service, lookup, context, acme_id
    ) -> None:
        """A user provisioned after a miss is admitted on the next request."""
        first = await service.check(context, ALICE)
        lookup.return_value = acme_id
        second = await service.check(context, ALICE)

        assert first.outcome is MembershipOutcome.USER_NOT_FOUND
        assert second.allowed
        assert lookup.await_count == 2

    @pytest.mark.asyncio
    async def test_cache_is_keyed_by_request_tenant(
        self, service, lookup, acme_id
    ) -> None:
        """A lookup cached for tenant A is not reused when serving tenant B."""
        lookup.return_value = acme_id
        acme = TenantContext.for_saas(acme_id.value, SubscriptionTier.FREE)
        globex = TenantContext.for_saas(uuid4(), SubscriptionTier.FREE)

        await service.check(acme, ALICE)
        decision = await service.check(globex, ALICE)

        assert decision.outcome is MembershipOutcome.TENANT_MISMATCH
        assert lookup.await_count == 2

    @pytest.mark.asyncio
    async def test_works_without_cache(self, lookup, context, acme_id) -> None:
        lookup.return_value = acme_id
        service = TenantMembershipService(home_tenant_lookup=lookup)

        await service.check(context, ALICE)
        await service.check(context, ALICE)

        assert lookup.await_count == 2
