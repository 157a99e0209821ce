"""Application services for IAM bounded context.

Application services orchestrate domain aggregates, repositories, and
other infrastructure to fulfill use cases. They are the "front door" to
the IAM context.
"""

from iam.application.services.tenant_membership_service import (
    TenantMembershipService,
    decide_membership,
)
from iam.application.services.tenant_resolution_service import TenantResolver

__all__ = [
    "TenantMembershipService",
    "TenantResolver",
    "decide_membership",
]
