"""Shared middleware primitives for tenant isolation.

This module contains the framework-agnostic pieces shared across bounded
contexts: the TenantContext value object, the flow-scoped accessor that
propagates it through a request, and the Host header subdomain parser.
"""

from shared_kernel.middleware.context_propagator import (
    TenantContextAccessor,
    TenantContextMissingError,
    get_tenant_context_accessor,
)
from shared_kernel.middleware.subdomain import extract_subdomain
from shared_kernel.middleware.tenant_context import (
    DEFAULT_TENANT_ID,
    DeploymentMode,
    SubscriptionTier,
    TenantContext,
)

__all__ = [
    "DEFAULT_TENANT_ID",
    "DeploymentMode",
    "SubscriptionTier",
    "TenantContext",
    "TenantContextAccessor",
    "TenantContextMissingError",
    "extract_subdomain",
    "get_tenant_context_accessor",
]
