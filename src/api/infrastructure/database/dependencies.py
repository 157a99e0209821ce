"""Database dependency injection for FastAPI.

Provides async session factories for read and write operations. Both
factories produce sessions of a class with the tenant row filter installed,
so every repository and handler that obtains a session through this module
is filtered without opting in.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_read_engine, create_write_engine
from infrastructure.database.tenant_filter import (
    TenantFilterPolicy,
    build_session_class,
)
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import get_database_settings, get_tenancy_settings

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings

# Module-level probe for observability
_probe = DefaultConnectionProbe()

# Module-level engine instances (created by init_database or on first use)
_write_engine: AsyncEngine | None = None
_read_engine: AsyncEngine | None = None

_write_sessionmaker: async_sessionmaker[AsyncSession] | None = None
_read_sessionmaker: async_sessionmaker[AsyncSession] | None = None

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def init_database(
    settings: DatabaseSettings | None = None,
    policy: TenantFilterPolicy | None = None,
) -> None:
    """Create the engines and the tenant-filtered session factories.

    Idempotent: the first call wins until close_database_connections().

    Args:
        settings: Connection settings (environment by default)
        policy: Tenant filter policy (derived from the deployment mode by default)
    """
    global _write_engine, _read_engine, _write_sessionmaker, _read_sessionmaker
    with _engine_lock:
        if _write_engine is not None:
            return

        settings = settings or get_database_settings()
        policy = policy or TenantFilterPolicy.from_deployment_mode(
            get_tenancy_settings().deployment_mode
        )
        session_class = build_session_class(policy)

        _write_engine = create_write_engine(settings)
        _write_sessionmaker = async_sessionmaker(
            _write_engine,
            expire_on_commit=False,
            class_=AsyncSession,
            sync_session_class=session_class,
        )
        _probe.engine_created("write", settings.connection_string, policy.enabled)

        _read_engine = create_read_engine(settings)
        _read_sessionmaker = async_sessionmaker(
            _read_engine,
            expire_on_commit=False,
            class_=AsyncSession,
            sync_session_class=session_class,
        )
        _probe.engine_created("read", settings.connection_string, policy.enabled)


def get_write_engine() -> AsyncEngine:
    """Get the write database engine, initializing on first use."""
    if _write_engine is None:
        init_database()
    assert _write_engine is not None
    return _write_engine


def get_read_engine() -> AsyncEngine:
    """Get the read database engine, initializing on first use."""
    if _read_engine is None:
        init_database()
    assert _read_engine is not None
    return _read_engine


def get_write_sessionmaker() -> async_sessionmaker[AsyncSession]:
    if _write_sessionmaker is None:
        init_database()
    assert _write_sessionmaker is not None
    return _write_sessionmaker


def get_read_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Session factory used for lookups that must never write.

    Tenant resolution runs outside of FastAPI's dependency injection, so it
    opens its sessions from this factory directly.
    """
    if _read_sessionmaker is None:
        init_database()
    assert _read_sessionmaker is not None
    return _read_sessionmaker


async def get_write_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a write session for mutations (FastAPI dependency).

    The session is configured to NOT auto-commit. Callers must explicitly
    manage transactions using `async with session.begin()`.

    Usage:
        @router.post("/students")
        async def enroll(session: AsyncSession = Depends(get_write_session)):
            async with session.begin():
                session.add(student)  # tenant_id stamped on flush

    Yields:
        AsyncSession for database operations
    """
    async with get_write_sessionmaker()() as session:
        yield session


async def get_read_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a read-only session for queries (FastAPI dependency).

    Usage:
        @router.get("/students")
        async def list_students(session: AsyncSession = Depends(get_read_session)):
            result = await session.execute(select(StudentModel))
            return result.scalars().all()  # current tenant's rows only

    Yields:
        AsyncSession for read-only database operations
    """
    async with get_read_sessionmaker()() as session:
        yield session


async def close_database_connections() -> None:
    """Close all database engine connections.

    Should be called on application shutdown to properly cleanup connections.
    Also resets sessionmakers to allow reinitialization.
    """
    global _write_engine, _read_engine, _write_sessionmaker, _read_sessionmaker

    if _write_engine is not None:
        await _write_engine.dispose()
        _probe.pool_closed("write")
        _write_engine = None
        _write_sessionmaker = None

    if _read_engine is not None:
        await _read_engine.dispose()
        _probe.pool_closed("read")
        _read_engine = None
        _read_sessionmaker = None
