"""Flow-scoped propagation of the current tenant context.

The accessor makes the request's TenantContext visible to any code running
within that request, including code reached through awaits and child tasks,
without threading it through every call. Storage is a ContextVar: each
asyncio task runs in its own copy of the context, so two requests handled
concurrently on the same event loop never observe each other's value.

Usage:
    accessor = get_tenant_context_accessor()

    with accessor.scoped(context):
        ...  # accessor.get() returns context here, in this flow only
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from functools import lru_cache

from shared_kernel.middleware.tenant_context import TenantContext


class TenantContextMissingError(LookupError):
    """Raised by TenantContextAccessor.require() when no context is set."""

    pass


class TenantContextAccessor:
    """Capability object giving read/write access to the current tenant context.

    One instance is shared by the whole process, but the value it holds is
    scoped to the calling logical flow. The accessor holds no business logic.
    """

    def __init__(self, name: str = "tenant_context") -> None:
        self._current: ContextVar[TenantContext | None] = ContextVar(
            name, default=None
        )

    def get(self) -> TenantContext | None:
        """Return the context visible to the current flow, or None."""
        return self._current.get()

    def require(self) -> TenantContext:
        """Return the current context or raise if none is set.

        Raises:
            TenantContextMissingError: If no context is visible to this flow.
        """
        context = self._current.get()
        if context is None:
            raise TenantContextMissingError(
                "Tenant context not available for the current request"
            )
        return context

    def set(self, context: TenantContext | None) -> Token[TenantContext | None]:
        """Set (or clear, with None) the context for the current flow only.

        Returns:
            A token that restores the previous value when passed to reset().
        """
        return self._current.set(context)

    def clear(self) -> Token[TenantContext | None]:
        """Clear the context for the current flow only."""
        return self._current.set(None)

    def reset(self, token: Token[TenantContext | None]) -> None:
        """Restore the value that was current before the matching set()."""
        self._current.reset(token)

    @contextmanager
    def scoped(self, context: TenantContext | None) -> Iterator[TenantContext | None]:
        """Set the context for the duration of a with-block, then restore it."""
        token = self._current.set(context)
        try:
            yield context
        finally:
            self._current.reset(token)


@lru_cache
def get_tenant_context_accessor() -> TenantContextAccessor:
    """Get the process-wide tenant context accessor.

    Uses lru_cache so that the middleware, the authorization policy and the
    row filter all read the same ContextVar.
    """
    return TenantContextAccessor()
