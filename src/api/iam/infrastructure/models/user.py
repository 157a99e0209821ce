"""SQLAlchemy ORM model for the users table.

Users belong to exactly one tenant, so the table is tenant-scoped and every
query against it goes through the tenant row filter.
"""

import uuid

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TenantScopedMixin, TimestampMixin


class UserModel(Base, TenantScopedMixin, TimestampMixin):
    """ORM model for users table (metadata only).

    external_id is the identity provider subject; it is unique per tenant.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("tenant_id", "external_id", name="uq_users_tenant_external_id"),
        UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return (
            f"<UserModel(id={self.id}, tenant_id={self.tenant_id}, "
            f"external_id={self.external_id})>"
        )
