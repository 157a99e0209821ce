"""SQLAlchemy implementation of IUserRepository.

Users are provisioned from each tenant's identity provider realm; this
repository only handles their metadata. The users table is tenant-scoped,
so everything here except the home tenant lookup sees the current tenant's
users only.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import User
from iam.domain.value_objects import TenantId, UserId
from iam.infrastructure.models import UserModel
from iam.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from iam.ports.repositories import IUserRepository
from infrastructure.database.tenant_filter import INCLUDE_ALL_TENANTS


class UserRepository(IUserRepository):
    """Repository for User aggregates."""

    def __init__(
        self, session: AsyncSession, probe: UserRepositoryProbe | None = None
    ) -> None:
        """Initialize repository with database session and probe.

        Args:
            session: AsyncSession from the read or write session factory
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def save(self, user: User) -> None:
        """Persist a user aggregate within the caller's transaction.

        The row filter refuses the flush if the user belongs to a tenant
        other than the current one.
        """
        model = await self._session.get(UserModel, user.id.value)
        if model is None:
            model = UserModel(id=user.id.value, tenant_id=user.tenant_id.value)
            self._session.add(model)

        model.external_id = user.external_id
        model.email = user.email
        model.is_active = user.is_active
        await self._session.flush()

        self._probe.user_saved(str(user.id), str(user.tenant_id))

    async def get_by_external_id(self, external_id: str) -> User | None:
        stmt = select(UserModel).where(UserModel.external_id == external_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.user_not_found(external_id)
            return None

        self._probe.user_retrieved(str(model.id))
        return User(
            id=UserId(value=model.id),
            tenant_id=TenantId(value=model.tenant_id),
            external_id=model.external_id,
            email=model.email,
            is_active=model.is_active,
        )

    async def get_tenant_id_by_subject(self, external_id: str) -> TenantId | None:
        """Look up a subject's home tenant across all tenants.

        Bypasses the tenant row filter on purpose: a user from another tenant
        must be found so the mismatch can be denied and logged.
        """
        stmt = (
            select(UserModel.tenant_id)
            .where(UserModel.external_id == external_id)
            .order_by(UserModel.created_at)
            .limit(1)
            .execution_options(**{INCLUDE_ALL_TENANTS: True})
        )
        result = await self._session.execute(stmt)
        tenant_id = result.scalar_one_or_none()

        if tenant_id is None:
            self._probe.user_not_found(external_id)
            return None

        self._probe.home_tenant_looked_up(external_id, str(tenant_id))
        return TenantId(value=tenant_id)
