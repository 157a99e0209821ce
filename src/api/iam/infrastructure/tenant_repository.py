"""SQLAlchemy implementation of ITenantRepository.

This repository is the tenant directory: it maps subdomains to tenants for
request resolution and stores tenant metadata for provisioning. The tenants
table is not tenant-scoped, so lookups here work before any tenant context
exists.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import Tenant
from iam.domain.value_objects import SubscriptionStatus, TenantId
from iam.infrastructure.models import TenantModel
from iam.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from iam.ports.exceptions import DuplicateSubdomainError
from iam.ports.repositories import ITenantRepository
from shared_kernel.middleware.tenant_context import SubscriptionTier


class TenantRepository(ITenantRepository):
    """Repository managing storage for Tenant aggregates.

    Write operations flush but never commit; the caller owns the transaction.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from the read or write session factory
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def save(self, tenant: Tenant) -> None:
        """Persist tenant metadata.

        Raises:
            DuplicateSubdomainError: If another tenant already owns the subdomain
        """
        stmt = select(TenantModel).where(TenantModel.subdomain == tenant.subdomain)
        result = await self._session.execute(stmt)
        existing = result.scalar_one_or_none()
        if existing is not None and existing.id != tenant.id.value:
            self._probe.duplicate_subdomain(tenant.subdomain)
            raise DuplicateSubdomainError(
                f"Subdomain '{tenant.subdomain}' is already taken"
            )

        try:
            model = existing or await self._session.get(TenantModel, tenant.id.value)
            if model is None:
                model = TenantModel(id=tenant.id.value)
                self._session.add(model)

            model.name = tenant.name
            model.subdomain = tenant.subdomain
            model.subscription_tier = int(tenant.subscription_tier)
            model.subscription_status = tenant.subscription_status.value
            model.identity_realm = tenant.identity_realm
            model.admin_email = tenant.admin_email
            model.is_active = tenant.is_active

            await self._session.flush()
        except IntegrityError as e:
            if "subdomain" in str(e):
                self._probe.duplicate_subdomain(tenant.subdomain)
                raise DuplicateSubdomainError(
                    f"Subdomain '{tenant.subdomain}' is already taken"
                ) from e
            raise

        self._probe.tenant_saved(str(tenant.id))

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        stmt = select(TenantModel).where(TenantModel.id == tenant_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.tenant_not_found("id", str(tenant_id))
            return None

        tenant = self._to_aggregate(model)
        self._probe.tenant_retrieved(str(tenant.id))
        return tenant

    async def get_active_by_subdomain(self, subdomain: str) -> Tenant | None:
        """Fetch the active tenant owning a subdomain.

        Args:
            subdomain: Lowercase subdomain label

        Returns:
            The Tenant aggregate, or None if unknown or inactive
        """
        stmt = select(TenantModel).where(
            TenantModel.subdomain == subdomain,
            TenantModel.is_active.is_(True),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.tenant_not_found("subdomain", subdomain)
            return None

        tenant = self._to_aggregate(model)
        self._probe.tenant_retrieved(str(tenant.id))
        return tenant

    @staticmethod
    def _to_aggregate(model: TenantModel) -> Tenant:
        return Tenant(
            id=TenantId(value=model.id),
            name=model.name,
            subdomain=model.subdomain,
            identity_realm=model.identity_realm,
            admin_email=model.admin_email,
            subscription_tier=SubscriptionTier(model.subscription_tier),
            subscription_status=SubscriptionStatus(model.subscription_status),
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
