"""User aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass

from iam.domain.value_objects import TenantId, UserId


@dataclass(frozen=True)
class User:
    """User aggregate representing a person within one tenant.

    Users are provisioned from the tenant's identity provider realm.
    external_id is the provider's stable subject (`sub`), which is how an
    authenticated principal is mapped back to its home tenant.
    """

    id: UserId
    tenant_id: TenantId
    external_id: str
    email: str
    is_active: bool = True

    def __str__(self) -> str:
        return f"User({self.email})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def belongs_to(self, tenant_id: TenantId) -> bool:
        return self.tenant_id == tenant_id
