"""Probe for turning a bearer token into the request's principal."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shared_kernel.observability_context import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthenticationProbe(Protocol):
    """Events of the get_current_principal dependency.

    Authentication only names the caller; whether the caller may act on the
    resolved tenant is reported separately by the membership probe.
    """

    def principal_authenticated(self, subject: str, username: str | None) -> None:
        """Record that a bearer token identified a subject."""
        ...

    def authentication_failed(self, reason: str) -> None:
        """Record that the request carried no usable bearer token."""
        ...

    def with_context(self, context: ObservationContext) -> AuthenticationProbe: ...


class DefaultAuthenticationProbe(StructlogProbe):
    def principal_authenticated(self, subject: str, username: str | None) -> None:
        self._emit(
            "info", "principal_authenticated", subject=subject, username=username
        )

    def authentication_failed(self, reason: str) -> None:
        self._emit("warning", "authentication_failed", reason=reason)
