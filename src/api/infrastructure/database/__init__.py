"""Database infrastructure - shared engines, sessions and the tenant row filter."""

from infrastructure.database.exceptions import (
    CrossTenantWriteError,
    DatabaseError,
    TenantIdImmutableError,
)

__all__ = [
    "CrossTenantWriteError",
    "DatabaseError",
    "TenantIdImmutableError",
]
