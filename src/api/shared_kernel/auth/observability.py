"""Probe for access token verification.

Reports which identity-provider subjects were accepted, why tokens were
rejected, and how the provider's signing keys were obtained. Raw tokens
and claims other than the subject are never logged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shared_kernel.observability_context import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class JWTValidatorProbe(Protocol):
    """Events of verifying bearer tokens against the identity provider."""

    def access_token_accepted(self, subject: str) -> None: ...

    def access_token_rejected(self, reason: str) -> None: ...

    def signing_keys_fetched(self, key_count: int) -> None: ...

    def signing_keys_reused(self) -> None: ...

    def signing_keys_unavailable(self, error: str) -> None: ...

    def with_context(self, context: ObservationContext) -> JWTValidatorProbe: ...


class DefaultJWTValidatorProbe(StructlogProbe):
    def access_token_accepted(self, subject: str) -> None:
        self._emit("debug", "access_token_validated", subject=subject)

    def access_token_rejected(self, reason: str) -> None:
        self._emit("warning", "access_token_rejected", reason=reason)

    def signing_keys_fetched(self, key_count: int) -> None:
        self._emit("info", "signing_keys_fetched", key_count=key_count)

    def signing_keys_reused(self) -> None:
        self._emit("debug", "signing_keys_cache_hit")

    def signing_keys_unavailable(self, error: str) -> None:
        # Every token is rejected until the provider answers again
        self._emit("error", "signing_keys_fetch_failed", error=error)
