"""Per-process cache of a subject's home tenant for the membership check.

Entries are keyed by both the subject and the tenant the request resolved
to, so the answer computed while serving one tenant is never reused to
answer for another. Only positive lookups are cached: a user provisioned a
moment ago must not stay locked out until a negative entry expires.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

from iam.domain.value_objects import TenantId

DEFAULT_TTL_SECONDS = 300


def membership_cache_key(subject: str, context_tenant_id: TenantId) -> str:
    return f"user:tenant:{subject}:{context_tenant_id}"


@dataclass(frozen=True)
class _Entry:
    tenant_id: TenantId
    expires_at: float


class UserTenantCache:
    """TTL cache mapping (subject, request tenant) to the subject's home tenant.

    Reads are lock-free; writes are serialized with an asyncio.Lock. A TTL of
    zero disables caching entirely.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self._ttl_seconds > 0

    def get(self, subject: str, context_tenant_id: TenantId) -> TenantId | None:
        """Return the cached home tenant, or None on a miss or expired entry."""
        if not self.enabled:
            return None
        entry = self._entries.get(membership_cache_key(subject, context_tenant_id))
        if entry is None or entry.expires_at <= self._clock():
            return None
        return entry.tenant_id

    async def put(
        self, subject: str, context_tenant_id: TenantId, tenant_id: TenantId
    ) -> None:
        if not self.enabled:
            return
        async with self._lock:
            now = self._clock()
            self._evict_expired(now)
            self._entries[membership_cache_key(subject, context_tenant_id)] = _Entry(
                tenant_id=tenant_id,
                expires_at=now + self._ttl_seconds,
            )

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
