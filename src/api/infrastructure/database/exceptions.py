"""Database-specific exceptions shared across bounded contexts."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class CrossTenantWriteError(DatabaseError):
    """Raised when a flush would write a tenant-scoped row outside the current tenant.

    Covers rows whose tenant_id differs from the tenant context, and any
    tenant-scoped write attempted while filtering is enabled but no tenant
    context is set.
    """

    def __init__(
        self,
        entity: str,
        row_tenant_id: str | None,
        context_tenant_id: str | None,
    ):
        self.entity = entity
        self.row_tenant_id = row_tenant_id
        self.context_tenant_id = context_tenant_id
        super().__init__(
            f"Refusing to write {entity} for tenant {row_tenant_id} "
            f"(current tenant: {context_tenant_id})"
        )


class TenantIdImmutableError(DatabaseError):
    """Raised when a flush or an UPDATE statement would change a row's tenant_id."""

    def __init__(
        self, entity: str, old_tenant_id: str | None, new_tenant_id: str | None
    ):
        self.entity = entity
        self.old_tenant_id = old_tenant_id
        self.new_tenant_id = new_tenant_id
        super().__init__(
            f"tenant_id of {entity} cannot change "
            f"(from {old_tenant_id} to {new_tenant_id})"
        )
