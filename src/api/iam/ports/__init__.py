"""Ports (interfaces) for IAM bounded context.

Ports define the contracts for repositories without specifying
implementation details. This allows for dependency inversion and makes
the application layer independent of infrastructure.
"""

from iam.ports.exceptions import (
    DuplicateSubdomainError,
    SubscriptionCancelledError,
    TenantMembershipDeniedError,
    TenantNotFoundError,
)
from iam.ports.repositories import ITenantRepository, IUserRepository

__all__ = [
    "DuplicateSubdomainError",
    "ITenantRepository",
    "IUserRepository",
    "SubscriptionCancelledError",
    "TenantMembershipDeniedError",
    "TenantNotFoundError",
]
