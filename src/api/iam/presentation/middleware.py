"""Tenant resolution ASGI middleware.

Installed outermost, so it runs before routing, authentication and every
handler. For each HTTP request it resolves the tenant from the Host header,
publishes the result through the tenant context accessor for the duration
of the request, and binds tenant_id into structlog's context variables so
every log line of the request carries it.

Requests addressed to an unknown or cancelled organization never reach
the application; the middleware answers them itself:

    404 {"error": "Organization not found", "subdomain": "<slug>"}
    403 {"error": "Subscription cancelled", "subdomain": "<slug>"}
"""

from __future__ import annotations

import structlog
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from iam.application.services import TenantResolver
from iam.ports.exceptions import SubscriptionCancelledError, TenantNotFoundError
from shared_kernel.middleware.context_propagator import (
    TenantContextAccessor,
    get_tenant_context_accessor,
)


class TenantResolutionMiddleware:
    """Pure ASGI middleware populating the tenant context of each request."""

    def __init__(
        self,
        app: ASGIApp,
        resolver: TenantResolver,
        accessor: TenantContextAccessor | None = None,
    ) -> None:
        self.app = app
        self._resolver = resolver
        self._accessor = accessor or get_tenant_context_accessor()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        host = Headers(scope=scope).get("host")
        try:
            context = await self._resolver.resolve(host)
        except TenantNotFoundError as e:
            response = JSONResponse(
                status_code=404,
                content={"error": "Organization not found", "subdomain": e.subdomain},
            )
            await response(scope, receive, send)
            return
        except SubscriptionCancelledError as e:
            response = JSONResponse(
                status_code=403,
                content={"error": "Subscription cancelled", "subdomain": e.subdomain},
            )
            await response(scope, receive, send)
            return

        log_context = {"tenant_id": str(context.tenant_id)} if context else {}
        token = self._accessor.set(context)
        try:
            with structlog.contextvars.bound_contextvars(**log_context):
                await self.app(scope, receive, send)
        finally:
            self._accessor.reset(token)
