"""Authentication FastAPI dependencies.

Validates the bearer token issued by the identity provider and exposes the
verified principal. Tenant membership is not decided here; see
iam.dependencies.tenant_membership.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2AuthorizationCodeBearer

from iam.application.observability import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from iam.application.value_objects import AuthenticatedPrincipal
from infrastructure.settings import get_oidc_settings
from shared_kernel.auth import InvalidTokenError, JWTValidator
from shared_kernel.auth.observability import DefaultJWTValidatorProbe


def _create_oauth2_scheme() -> OAuth2AuthorizationCodeBearer:
    """Create OAuth2 security scheme for Swagger UI integration.

    Uses the OIDC issuer URL to configure authorization code flow endpoints.
    """
    issuer = get_oidc_settings().issuer_url.rstrip("/")

    return OAuth2AuthorizationCodeBearer(
        authorizationUrl=f"{issuer}/protocol/openid-connect/auth",
        tokenUrl=f"{issuer}/protocol/openid-connect/token",
        refreshUrl=f"{issuer}/protocol/openid-connect/token",
        scopes={
            "openid": "OpenID Connect",
            "profile": "User profile",
            "email": "User email",
        },
        auto_error=False,
    )


oauth2_scheme = _create_oauth2_scheme()


@lru_cache
def get_jwt_validator() -> JWTValidator:
    """Get cached JWT validator.

    Uses lru_cache to ensure a single JWTValidator instance is reused across
    requests, enabling reuse of the instance-level JWKS cache.
    """
    settings = get_oidc_settings()
    return JWTValidator(
        issuer_url=settings.issuer_url,
        audience=settings.effective_audience,
        probe=DefaultJWTValidatorProbe(),
        user_id_claim=settings.user_id_claim,
        username_claim=settings.username_claim,
    )


def get_authentication_probe() -> AuthenticationProbe:
    return DefaultAuthenticationProbe()


async def get_optional_principal(
    validator: Annotated[JWTValidator, Depends(get_jwt_validator)],
    probe: Annotated[AuthenticationProbe, Depends(get_authentication_probe)],
    token: Annotated[str | None, Depends(oauth2_scheme)] = None,
) -> AuthenticatedPrincipal | None:
    """Return the verified principal, or None when no token was sent.

    FastAPI caches the result per request, so downstream dependencies share
    one validation.

    Raises:
        HTTPException 401: If a token was sent but is invalid
    """
    if token is None:
        return None

    try:
        claims = await validator.validate_token(token)
    except InvalidTokenError as e:
        probe.authentication_failed(reason=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    probe.principal_authenticated(claims.sub, claims.preferred_username)
    return AuthenticatedPrincipal(
        subject=claims.sub,
        username=claims.preferred_username,
        claims=claims.raw,
    )


async def get_current_principal(
    principal: Annotated[
        AuthenticatedPrincipal | None, Depends(get_optional_principal)
    ],
    probe: Annotated[AuthenticationProbe, Depends(get_authentication_probe)],
) -> AuthenticatedPrincipal:
    """Require an authenticated principal.

    Raises:
        HTTPException 401: If the request carries no bearer token
    """
    if principal is None:
        probe.authentication_failed(reason="Missing authorization")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal
