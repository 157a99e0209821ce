"""Probe for the tenant row filter.

Reports what the filter did at the data access boundary: queries that
failed closed for lack of a tenant context, explicit bypasses, rows
stamped with their tenant, and writes that were refused.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shared_kernel.observability_context import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantFilterProbe(Protocol):
    """Domain probe for tenant row filter operations."""

    def filter_applied_without_context(self, entities: list[str]) -> None:
        """Record that a query ran with filtering on but no tenant context.

        The query matches no rows. This almost always means a code path
        reached the database outside of a resolved request.
        """
        ...

    def filter_bypassed(self, entities: list[str]) -> None:
        """Record that a query explicitly opted out of tenant filtering."""
        ...

    def tenant_id_stamped(self, entity: str, tenant_id: str) -> None:
        """Record that a new row was assigned the current tenant."""
        ...

    def cross_tenant_write_blocked(
        self,
        entity: str,
        row_tenant_id: str | None,
        context_tenant_id: str | None,
    ) -> None:
        """Record that a write outside the current tenant was refused."""
        ...

    def tenant_id_change_blocked(
        self, entity: str, old_tenant_id: str | None, new_tenant_id: str | None
    ) -> None:
        """Record that a change to a row's tenant_id was refused."""
        ...

    def with_context(self, context: ObservationContext) -> TenantFilterProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantFilterProbe(StructlogProbe):
    def filter_applied_without_context(self, entities: list[str]) -> None:
        self._emit(
            "warning", "tenant_filter_applied_without_context", entities=entities
        )

    def filter_bypassed(self, entities: list[str]) -> None:
        self._emit("debug", "tenant_filter_bypassed", entities=entities)

    def tenant_id_stamped(self, entity: str, tenant_id: str) -> None:
        self._emit("debug", "tenant_id_stamped", entity=entity, tenant_id=tenant_id)

    def cross_tenant_write_blocked(
        self,
        entity: str,
        row_tenant_id: str | None,
        context_tenant_id: str | None,
    ) -> None:
        self._emit(
            "error",
            "cross_tenant_write_blocked",
            entity=entity,
            row_tenant_id=row_tenant_id,
            context_tenant_id=context_tenant_id,
        )

    def tenant_id_change_blocked(
        self, entity: str, old_tenant_id: str | None, new_tenant_id: str | None
    ) -> None:
        self._emit(
            "error",
            "tenant_id_change_blocked",
            entity=entity,
            old_tenant_id=old_tenant_id,
            new_tenant_id=new_tenant_id,
        )
