"""Repository protocols (ports) for IAM bounded context.

Repository protocols define the interface for persisting and retrieving
aggregates. The tenant repository is the tenant directory used by request
resolution; the user repository maps identity provider subjects back to
their home tenant.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iam.domain.aggregates import Tenant, User
from iam.domain.value_objects import TenantId


@runtime_checkable
class IUserRepository(Protocol):
    """Repository for User aggregate persistence.

    Users are provisioned from each tenant's identity provider realm, so
    this repository only handles metadata storage and retrieval.
    """

    async def save(self, user: User) -> None:
        """Persist a user aggregate.

        Creates a new user or updates an existing one.
        """
        ...

    async def get_by_external_id(self, external_id: str) -> User | None:
        """Retrieve a user by identity provider subject within the current tenant.

        Args:
            external_id: The identity provider's `sub` for the user

        Returns:
            The User aggregate, or None if not found
        """
        ...

    async def get_tenant_id_by_subject(self, external_id: str) -> TenantId | None:
        """Look up the home tenant of a subject across all tenants.

        This is the one read that must see past the tenant row filter: the
        authoritative user record may belong to a tenant other than the one
        the request addressed, and that mismatch has to be observable.

        Args:
            external_id: The identity provider's `sub` for the user

        Returns:
            The tenant the user belongs to, or None if no user has that subject
        """
        ...


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregate persistence.

    Tenants are the top-level isolation boundary. The tenants table itself
    is tenant-agnostic: it is the directory requests are resolved against.
    """

    async def save(self, tenant: Tenant) -> None:
        """Persist a tenant aggregate.

        Raises:
            DuplicateSubdomainError: If another tenant already owns the subdomain
        """
        ...

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by its ID, active or not.

        Returns:
            The Tenant aggregate, or None if not found
        """
        ...

    async def get_active_by_subdomain(self, subdomain: str) -> Tenant | None:
        """Retrieve the active tenant addressed by a subdomain.

        Inactive tenants are indistinguishable from unknown ones. A tenant
        with a cancelled subscription is still returned; rejecting it is the
        caller's decision.

        Args:
            subdomain: Lowercase subdomain label

        Returns:
            The active Tenant aggregate, or None
        """
        ...
