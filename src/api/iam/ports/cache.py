"""Cache protocol (port) for the tenant membership check."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iam.domain.value_objects import TenantId


@runtime_checkable
class IUserTenantCache(Protocol):
    """Cache of a subject's home tenant, keyed by subject and request tenant."""

    def get(self, subject: str, context_tenant_id: TenantId) -> TenantId | None:
        """Return the cached home tenant, or None on a miss."""
        ...

    async def put(
        self, subject: str, context_tenant_id: TenantId, tenant_id: TenantId
    ) -> None:
        """Cache a positive lookup."""
        ...
