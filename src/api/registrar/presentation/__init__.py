"""Registrar presentation layer."""

from registrar.presentation.routes import router

__all__ = ["router"]
