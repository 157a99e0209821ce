"""Probe for the database engines behind the read and write sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shared_kernel.observability_context import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionProbe(Protocol):
    """Lifecycle of the read and write engines.

    Every engine is logged with whether its sessions enforce the tenant
    row filter, so a deployment's isolation mode is visible per pool.
    """

    def engine_created(self, role: str, target: str, filtering_enabled: bool) -> None:
        """Record that a read or write engine was created."""
        ...

    def pool_closed(self, role: str) -> None:
        """Record that an engine's connection pool was disposed."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe: ...


class DefaultConnectionProbe(StructlogProbe):
    def engine_created(self, role: str, target: str, filtering_enabled: bool) -> None:
        self._emit(
            "info",
            "database_engine_created",
            role=role,
            target=target,
            tenant_filtering_enabled=filtering_enabled,
        )

    def pool_closed(self, role: str) -> None:
        self._emit("info", "connection_pool_closed", role=role)
