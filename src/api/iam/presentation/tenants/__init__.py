"""Tenant aggregate presentation layer."""

from iam.presentation.tenants.routes import router

__all__ = ["router"]
