"""Application-layer value objects for IAM bounded context.

These are value objects specific to the application layer, representing
cross-cutting concerns like the authentication context of a request and
the outcome of the tenant membership check.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from iam.ports.exceptions import TenantMembershipDeniedError


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """The identity behind a request, as verified from its access token.

    Carries no tenant: the token's claims are never trusted for tenant
    membership, which is looked up from the user store by subject.

    This is an application-layer concept (not domain) because it represents
    the authentication context of the request, not a core business entity.
    """

    subject: str
    username: str | None = None
    claims: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


class MembershipOutcome(StrEnum):
    """Why the tenant membership check allowed or denied a request."""

    NO_TENANT_CONTEXT = "no_tenant_context"
    SELF_HOSTED = "self_hosted"
    MEMBER = "member"
    UNAUTHENTICATED = "unauthenticated"
    USER_NOT_FOUND = "user_not_found"
    TENANT_MISMATCH = "tenant_mismatch"


_ALLOWING_OUTCOMES = frozenset(
    {
        MembershipOutcome.NO_TENANT_CONTEXT,
        MembershipOutcome.SELF_HOSTED,
        MembershipOutcome.MEMBER,
    }
)


@dataclass(frozen=True)
class MembershipDecision:
    """Result of the tenant membership check.

    Attributes:
        outcome: The rule that decided the request
        user_tenant_id: The principal's home tenant, when it was looked up
    """

    outcome: MembershipOutcome
    user_tenant_id: str | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome in _ALLOWING_OUTCOMES

    @classmethod
    def allow(
        cls, outcome: MembershipOutcome, user_tenant_id: str | None = None
    ) -> MembershipDecision:
        return cls(outcome=outcome, user_tenant_id=user_tenant_id)

    @classmethod
    def deny(
        cls, outcome: MembershipOutcome, user_tenant_id: str | None = None
    ) -> MembershipDecision:
        return cls(outcome=outcome, user_tenant_id=user_tenant_id)

    def raise_if_denied(self) -> None:
        """Raise if the decision denies the request.

        Raises:
            TenantMembershipDeniedError: With the outcome as the reason
        """
        if not self.allowed:
            raise TenantMembershipDeniedError(self.outcome.value)
