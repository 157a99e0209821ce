"""FastAPI dependencies for IAM bounded context.

Composes infrastructure resources (database sessions, settings) with
IAM-specific components (repositories, services, policies).
"""
