"""Tenant aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from iam.domain.exceptions import InvalidSubdomainError
from iam.domain.value_objects import SubscriptionStatus, TenantId
from shared_kernel.middleware.subdomain import (
    is_reserved_subdomain,
    is_valid_subdomain,
)
from shared_kernel.middleware.tenant_context import SubscriptionTier


@dataclass
class Tenant:
    """Tenant aggregate representing an organization in the system.

    Tenants are the top-level isolation boundary. Each tenant is addressed
    by its own subdomain and owns its users and registrar data.

    Business rules:
    - The subdomain is a valid, non-reserved DNS label and globally unique
    - Tenants are never deleted, only deactivated
    - A cancelled subscription blocks access even while the tenant is active
    """

    id: TenantId
    name: str
    subdomain: str
    identity_realm: str
    admin_email: str
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    subscription_status: SubscriptionStatus = SubscriptionStatus.TRIALING
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        name: str,
        subdomain: str,
        identity_realm: str,
        admin_email: str,
        subscription_tier: SubscriptionTier = SubscriptionTier.FREE,
    ) -> Tenant:
        """Factory method for provisioning a new tenant.

        Args:
            name: Display name of the organization
            subdomain: Requested subdomain, normalized to lowercase
            identity_realm: Identity provider realm holding the tenant's users
            admin_email: Contact address of the tenant's administrator
            subscription_tier: Initial tier

        Returns:
            A new active Tenant in its trial period

        Raises:
            InvalidSubdomainError: If the subdomain is malformed or reserved
        """
        normalized = subdomain.strip().lower()
        if not is_valid_subdomain(normalized):
            raise InvalidSubdomainError(
                subdomain,
                "must be 1-63 lowercase letters, digits or hyphens, "
                "not starting or ending with a hyphen",
            )
        if is_reserved_subdomain(normalized):
            raise InvalidSubdomainError(subdomain, "reserved for platform use")

        return cls(
            id=TenantId.generate(),
            name=name,
            subdomain=normalized,
            identity_realm=identity_realm,
            admin_email=admin_email,
            subscription_tier=subscription_tier,
        )

    @property
    def is_cancelled(self) -> bool:
        return self.subscription_status is SubscriptionStatus.CANCELLED

    def deactivate(self) -> None:
        """Take the tenant offline; its subdomain stops resolving."""
        self.is_active = False
        self.updated_at = datetime.now(UTC)
