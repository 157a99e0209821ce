"""Value objects for IAM domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID, uuid4


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant aggregate."""

    value: UUID

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def generate(cls) -> TenantId:
        """Generate a new random TenantId."""
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from its string form.

        Raises:
            ValueError: If value is not a valid UUID
        """
        try:
            return cls(value=UUID(value))
        except (ValueError, AttributeError) as e:
            raise ValueError(f"Invalid TenantId: {value}") from e


@dataclass(frozen=True)
class UserId:
    """Identifier for a User aggregate."""

    value: UUID

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def generate(cls) -> UserId:
        """Generate a new random UserId."""
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from its string form.

        Raises:
            ValueError: If value is not a valid UUID
        """
        try:
            return cls(value=UUID(value))
        except (ValueError, AttributeError) as e:
            raise ValueError(f"Invalid UserId: {value}") from e


class SubscriptionStatus(StrEnum):
    """Billing status of a tenant's subscription.

    Only CANCELLED blocks access; PAST_DUE tenants keep working while
    billing is sorted out.
    """

    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELLED = "cancelled"
    TRIALING = "trialing"
