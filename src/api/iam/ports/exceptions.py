"""Exceptions for IAM bounded context ports.

These exceptions represent errors raised by repositories and by the tenant
isolation services. The presentation layer maps them to HTTP responses.
"""


class DuplicateSubdomainError(Exception):
    """Raised when attempting to save a tenant whose subdomain is taken.

    Subdomains address tenants, so they are globally unique.
    """

    pass


class TenantNotFoundError(Exception):
    """Raised when a request addresses a subdomain with no active tenant.

    Surfaced as 404 {"error": "Organization not found", "subdomain": ...}.
    """

    def __init__(self, subdomain: str):
        self.subdomain = subdomain
        super().__init__(f"No active tenant for subdomain '{subdomain}'")


class SubscriptionCancelledError(Exception):
    """Raised when a request addresses a tenant whose subscription is cancelled.

    Surfaced as 403 {"error": "Subscription cancelled", "subdomain": ...}.
    """

    def __init__(self, subdomain: str, tenant_id: str):
        self.subdomain = subdomain
        self.tenant_id = tenant_id
        super().__init__(f"Subscription cancelled for subdomain '{subdomain}'")


class TenantMembershipDeniedError(Exception):
    """Raised when the caller does not belong to the request's tenant.

    The reason is for logs only. Clients receive an opaque 403 so the
    response never confirms whether a user exists in another tenant.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Tenant membership denied: {reason}")
