"""Probe for application startup and shutdown.

The tenancy mode a process starts in decides its whole isolation story, so
it is logged once at startup, before the first request is served.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shared_kernel.observability_context import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def application_starting(
        self, version: str, deployment_mode: str, base_domain: str
    ) -> None:
        """Record the configuration the application is starting with."""
        ...

    def tenant_isolation_configured(self, filtering_enabled: bool) -> None:
        """Record whether tenant row filtering is enforced for this process."""
        ...

    def application_stopped(self) -> None:
        """Record that the application shut down cleanly."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe(StructlogProbe):
    def application_starting(
        self, version: str, deployment_mode: str, base_domain: str
    ) -> None:
        self._emit(
            "info",
            "application_starting",
            version=version,
            deployment_mode=deployment_mode,
            base_domain=base_domain or None,
        )

    def tenant_isolation_configured(self, filtering_enabled: bool) -> None:
        # Filtering off is legitimate only for self-hosted deployments
        level = "info" if filtering_enabled else "warning"
        self._emit(
            level, "tenant_isolation_configured", filtering_enabled=filtering_enabled
        )

    def application_stopped(self) -> None:
        self._emit("info", "application_stopped")
