"""JWT validation for the identity provider's access tokens.

Verifies signature, expiry, issuer and audience against the provider's JWKS
(discovered through OpenID configuration and cached for a TTL). Only the
verified subject and a display username are surfaced; tenant isolation never
trusts tenant-like claims carried in the token.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import httpx
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

if TYPE_CHECKING:
    from shared_kernel.auth.observability import JWTValidatorProbe


@dataclass(frozen=True)
class TokenClaims:
    """Verified token claims.

    Attributes:
        sub: Stable subject identifier issued by the identity provider.
        preferred_username: Display username, if the provider sent one.
        raw: All verified claims, for collaborators that need more.
    """

    sub: str
    preferred_username: str | None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


class InvalidTokenError(Exception):
    """Raised when JWT validation fails."""

    pass


class JWTValidator:
    """Validates RS256 JWTs using the issuer's JWKS.

    A single instance is meant to be shared across requests so the
    JWKS cache is reused.
    """

    def __init__(
        self,
        issuer_url: str,
        audience: str,
        probe: JWTValidatorProbe,
        user_id_claim: str = "sub",
        username_claim: str = "preferred_username",
        jwks_cache_ttl: timedelta = timedelta(hours=24),
        http_client_factory: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        self._issuer_url = issuer_url.rstrip("/")
        self._audience = audience
        self._probe = probe
        self._user_id_claim = user_id_claim
        self._username_claim = username_claim
        self._jwks_cache_ttl = jwks_cache_ttl
        self._http_client_factory = http_client_factory

        self._jwks: dict[str, Any] | None = None
        self._jwks_fetched_at: datetime | None = None
        self._jwks_lock = asyncio.Lock()

    async def validate_token(self, token: str) -> TokenClaims:
        """Validate a JWT and return its claims.

        Raises:
            InvalidTokenError: If the token is malformed, expired, or fails
                signature, issuer or audience verification.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            self._fail(f"Malformed token: {e}")
            raise InvalidTokenError(f"Invalid token format: {e}") from e
        if not header:
            self._fail("Missing token header")
            raise InvalidTokenError("Invalid token: missing header")

        claims = self._decode(token, await self._get_jwks())

        subject = claims.get(self._user_id_claim)
        if subject is None:
            self._fail(f"Missing {self._user_id_claim} claim")
            raise InvalidTokenError(f"Missing required claim: {self._user_id_claim}")

        username = claims.get(self._username_claim)
        self._probe.access_token_accepted(subject=str(subject))
        return TokenClaims(
            sub=str(subject),
            preferred_username=str(username) if username is not None else None,
            raw=claims,
        )

    def _decode(self, token: str, jwks: dict[str, Any]) -> dict[str, Any]:
        try:
            return jwt.decode(
                token=token,
                key=jwks,
                algorithms=["RS256"],
                audience=self._audience,
                issuer=self._issuer_url,
            )
        except ExpiredSignatureError as e:
            self._fail("Token expired")
            raise InvalidTokenError("Token has expired") from e
        except JWTClaimsError as e:
            message = str(e).lower()
            if "audience" in message:
                self._fail("Invalid audience")
                raise InvalidTokenError("Invalid audience claim") from e
            if "issuer" in message:
                self._fail("Invalid issuer")
                raise InvalidTokenError("Invalid issuer claim") from e
            self._fail(f"Claims error: {e}")
            raise InvalidTokenError(f"Invalid token claims: {e}") from e
        except JWTError as e:
            if "signature" in str(e).lower():
                self._fail("Invalid signature")
                raise InvalidTokenError("Invalid token signature") from e
            self._fail(f"JWT error: {e}")
            raise InvalidTokenError(f"Invalid token: {e}") from e

    def _fail(self, reason: str) -> None:
        self._probe.access_token_rejected(reason=reason)

    def _cache_is_fresh(self) -> bool:
        if self._jwks is None or self._jwks_fetched_at is None:
            return False
        age = datetime.now(tz=timezone.utc) - self._jwks_fetched_at
        return age < self._jwks_cache_ttl

    async def _get_jwks(self) -> dict[str, Any]:
        if self._cache_is_fresh():
            self._probe.signing_keys_reused()
            return self._jwks  # type: ignore[return-value]

        async with self._jwks_lock:
            # Another request may have refreshed while we waited
            if self._cache_is_fresh():
                self._probe.signing_keys_reused()
                return self._jwks  # type: ignore[return-value]
            return await self._fetch_jwks()

    async def _fetch_jwks(self) -> dict[str, Any]:
        discovery_url = f"{self._issuer_url}/.well-known/openid-configuration"
        try:
            async with self._http_client_factory() as client:
                discovery = await client.get(discovery_url)
                discovery.raise_for_status()
                jwks_uri = discovery.json().get("jwks_uri")
                if not jwks_uri:
                    self._probe.signing_keys_unavailable(
                        error="Missing jwks_uri in OpenID configuration"
                    )
                    raise InvalidTokenError(
                        "OIDC provider missing jwks_uri in configuration"
                    )

                response = await client.get(jwks_uri)
                response.raise_for_status()
                jwks = response.json()
        except httpx.HTTPError as e:
            self._probe.signing_keys_unavailable(error=str(e))
            raise InvalidTokenError(
                f"Failed to fetch JWKS from OIDC provider: {e}"
            ) from e

        self._jwks = jwks
        self._jwks_fetched_at = datetime.now(tz=timezone.utc)
        self._probe.signing_keys_fetched(key_count=len(jwks.get("keys", [])))
        return jwks
