"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Self

import structlog


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped metadata that should be included with all
    instrumentation events, so that resolution, authorization and data
    access events of one request can be correlated.

    Attributes:
        request_id: Unique identifier for the current request.
        user_id: Identity-provider subject of the caller (if known).
        tenant_id: Resolved tenant identifier (if any).
        subdomain: Subdomain the request was addressed to (if any).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", subdomain="acme")
        probe = DefaultTenantResolutionProbe().with_context(context)
    """

    request_id: str | None = None
    user_id: str | None = None
    tenant_id: str | None = None
    subdomain: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.user_id is not None:
            result["user_id"] = self.user_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        if self.subdomain is not None:
            result["subdomain"] = self.subdomain
        result.update(self.extra)
        return result

    def with_tenant(self, tenant_id: str) -> ObservationContext:
        """Create a new context with the tenant ID set."""
        return replace(self, tenant_id=tenant_id)

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return replace(self, extra={**self.extra, **kwargs})


class StructlogProbe:
    """Base for the structlog-backed default probes.

    Holds the logger and the optional bound ObservationContext. Events go
    through `_emit`, which appends the context's metadata; fields passed
    by the event take precedence over context keys of the same name.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def with_context(self, context: ObservationContext) -> Self:
        """Create a new probe of the same kind with observation context bound."""
        return type(self)(logger=self._logger, context=context)

    def _emit(self, level: str, event: str, **fields: Any) -> None:
        bound = self._context.as_dict() if self._context is not None else {}
        getattr(self._logger, level)(event, **{**bound, **fields})
