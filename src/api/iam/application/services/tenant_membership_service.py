"""Tenant membership check.

Second, independent line of defence behind subdomain resolution: a request
resolved to tenant A is served only if its authenticated principal is a
user of tenant A. A spoofed Host header therefore never grants access to
another tenant's data without credentials for a user of that tenant.

The decision rules live in the pure function decide_membership(); the
service wraps it with the (cached) lookup of the principal's home tenant.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from iam.application.observability import (
    DefaultTenantMembershipProbe,
    TenantMembershipProbe,
)
from iam.application.value_objects import (
    AuthenticatedPrincipal,
    MembershipDecision,
    MembershipOutcome,
)
from iam.domain.value_objects import TenantId
from iam.ports.cache import IUserTenantCache
from shared_kernel.middleware.tenant_context import TenantContext

HomeTenantLookup = Callable[[str], Awaitable[TenantId | None]]
"""Looks up the home tenant of an identity provider subject across tenants."""


def decide_membership(
    context: TenantContext | None,
    principal: AuthenticatedPrincipal | None,
    user_tenant_id: TenantId | None,
) -> MembershipDecision:
    """Apply the membership rules, in order.

    1. No tenant context: allow; the route is not tenant-scoped.
    2. Self-hosted: allow; there is only one tenant.
    3. No principal: deny (unauthenticated).
    4. No user record for the principal: deny (user not found).
    5. User belongs to another tenant: deny (tenant mismatch).
    6. Otherwise allow.
    """
    if context is None:
        return MembershipDecision.allow(MembershipOutcome.NO_TENANT_CONTEXT)
    if context.is_self_hosted:
        return MembershipDecision.allow(MembershipOutcome.SELF_HOSTED)
    if principal is None:
        return MembershipDecision.deny(MembershipOutcome.UNAUTHENTICATED)
    if user_tenant_id is None:
        return MembershipDecision.deny(MembershipOutcome.USER_NOT_FOUND)
    if user_tenant_id.value != context.tenant_id:
        return MembershipDecision.deny(
            MembershipOutcome.TENANT_MISMATCH, str(user_tenant_id)
        )
    return MembershipDecision.allow(MembershipOutcome.MEMBER, str(user_tenant_id))


class TenantMembershipService:
    """Checks that an authenticated principal belongs to the request's tenant."""

    def __init__(
        self,
        home_tenant_lookup: HomeTenantLookup,
        cache: IUserTenantCache | None = None,
        probe: TenantMembershipProbe | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            home_tenant_lookup: Cross-tenant lookup of a subject's home tenant
            cache: Optional cache of positive lookups
            probe: Optional domain probe for observability
        """
        self._home_tenant_lookup = home_tenant_lookup
        self._cache = cache
        self._probe = probe or DefaultTenantMembershipProbe()

    async def check(
        self,
        context: TenantContext | None,
        principal: AuthenticatedPrincipal | None,
    ) -> MembershipDecision:
        """Decide whether the principal may act within the context's tenant."""
        if context is None or context.is_self_hosted:
            decision = decide_membership(context, principal, None)
            self._probe.membership_skipped(decision.outcome.value)
            return decision

        if principal is None:
            self._probe.principal_missing()
            return decide_membership(context, None, None)

        request_tenant_id = TenantId(value=context.tenant_id)
        user_tenant_id = await self._lookup(principal.subject, request_tenant_id)
        decision = decide_membership(context, principal, user_tenant_id)

        if decision.outcome is MembershipOutcome.USER_NOT_FOUND:
            self._probe.user_not_found(principal.subject, str(request_tenant_id))
        elif decision.outcome is MembershipOutcome.TENANT_MISMATCH:
            self._probe.tenant_mismatch(
                principal.subject, str(user_tenant_id), str(request_tenant_id)
            )
        else:
            self._probe.membership_confirmed(
                principal.subject, str(request_tenant_id)
            )
        return decision

    async def _lookup(
        self, subject: str, request_tenant_id: TenantId
    ) -> TenantId | None:
        if self._cache is not None:
            cached = self._cache.get(subject, request_tenant_id)
            if cached is not None:
                self._probe.cache_hit(subject)
                return cached

        user_tenant_id = await self._home_tenant_lookup(subject)

        if user_tenant_id is not None and self._cache is not None:
            await self._cache.put(subject, request_tenant_id, user_tenant_id)
        return user_tenant_id
