"""SQLAlchemy ORM model for the tenants table.

The tenants table is the tenant directory itself. It is deliberately not
tenant-scoped: resolution reads it before any tenant context exists.
"""

import uuid

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class TenantModel(Base, TimestampMixin):
    """ORM model for tenants table."""

    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    subdomain: Mapped[str] = mapped_column(
        String(63), nullable=False, unique=True, index=True
    )
    subscription_tier: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subscription_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="trialing"
    )
    identity_realm: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True
    )
    admin_email: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<TenantModel(id={self.id}, subdomain={self.subdomain})>"
