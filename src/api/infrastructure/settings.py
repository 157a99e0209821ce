"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.

Tenancy settings are the exception: the deployment mode decides whether
tenant isolation is enforced at all, so it has no default and a missing or
invalid value stops the application from starting.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared_kernel.middleware.tenant_context import DeploymentMode


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid.

    Fatal at startup; the application must not serve requests without a
    well-defined deployment mode.
    """

    pass


class TenancySettings(BaseSettings):
    """Tenant isolation settings.

    Environment variables:
        REGISTRAR_TENANCY_DEPLOYMENT_MODE: "saas" or "selfhosted" (required)
        REGISTRAR_TENANCY_BASE_DOMAIN: Domain tenants are subdomains of,
            e.g. "ruffregistrar.com" (required in saas mode)
        REGISTRAR_TENANCY_MEMBERSHIP_CACHE_TTL_SECONDS: How long a user's home
            tenant is cached for the membership check (default: 300, 0 disables)
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    deployment_mode: DeploymentMode = Field(
        description="Deployment mode (saas or selfhosted)",
    )
    base_domain: str = Field(
        default="",
        description="Base domain tenant subdomains live under",
    )
    membership_cache_ttl_seconds: int = Field(
        default=300,
        description="TTL of the membership lookup cache in seconds",
        ge=0,
    )

    @field_validator("deployment_mode", mode="before")
    @classmethod
    def normalize_deployment_mode(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower().replace("-", "").replace("_", "")
        return value

    @field_validator("base_domain")
    @classmethod
    def normalize_base_domain(cls, value: str) -> str:
        return value.strip().lower().strip(".")

    @model_validator(mode="after")
    def validate_base_domain(self) -> "TenancySettings":
        """Require a base domain when tenants are resolved from subdomains."""
        if self.deployment_mode is DeploymentMode.SAAS and not self.base_domain:
            raise ValueError("base_domain is required when deployment_mode is saas")
        return self

    @property
    def filtering_enabled(self) -> bool:
        return self.deployment_mode is DeploymentMode.SAAS


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        REGISTRAR_DB_HOST: Database host (default: localhost)
        REGISTRAR_DB_PORT: Database port (default: 5432)
        REGISTRAR_DB_DATABASE: Database name (default: registrar)
        REGISTRAR_DB_USERNAME: Database user (default: registrar)
        REGISTRAR_DB_PASSWORD: Database password (required in production)
        REGISTRAR_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        REGISTRAR_DB_URL: Full SQLAlchemy URL overriding all of the above
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="registrar", description="Database name")
    username: str = Field(default="registrar", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    url: str | None = Field(
        default=None,
        description="Full database URL, e.g. sqlite+aiosqlite:///registrar.db",
    )

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        if self.url is not None:
            return self.url.split("@")[-1]
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class OIDCSettings(BaseSettings):
    """Identity provider settings for access token validation.

    Environment variables:
        REGISTRAR_OIDC_ISSUER_URL: Issuer URL (realm URL for Keycloak)
        REGISTRAR_OIDC_AUDIENCE: Expected audience (default: client id)
        REGISTRAR_OIDC_CLIENT_ID: OAuth client id (default: registrar-api)
        REGISTRAR_OIDC_USER_ID_CLAIM: Claim holding the subject (default: sub)
        REGISTRAR_OIDC_USERNAME_CLAIM: Claim holding the username
            (default: preferred_username)
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_OIDC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    issuer_url: str = Field(
        default="http://localhost:8080/realms/registrar",
        description="OIDC issuer URL",
    )
    client_id: str = Field(default="registrar-api", description="OAuth client id")
    audience: str | None = Field(default=None, description="Expected audience")
    user_id_claim: str = Field(default="sub", description="Subject claim")
    username_claim: str = Field(
        default="preferred_username", description="Username claim"
    )

    @property
    def effective_audience(self) -> str:
        return self.audience or self.client_id


class Settings(BaseSettings):
    """Main application settings.

    Environment variables:
        REGISTRAR_APP_NAME: Application name (default: Registrar API)
        REGISTRAR_DEBUG: Debug mode (default: false)
        REGISTRAR_LOG_LEVEL: Minimum log level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Registrar API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Minimum log level")


def load_tenancy_settings() -> TenancySettings:
    """Load tenancy settings, converting validation failures to ConfigurationError.

    Raises:
        ConfigurationError: If the deployment mode is missing or unknown, or if
            saas mode is configured without a base domain
    """
    try:
        return TenancySettings()  # type: ignore[call-arg]
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: "
            f"{error['msg']}"
            for error in e.errors()
        )
        raise ConfigurationError(f"Invalid tenancy configuration: {problems}") from e


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_tenancy_settings() -> TenancySettings:
    """Get cached tenancy settings.

    Uses lru_cache to ensure settings are only loaded once.

    Raises:
        ConfigurationError: See load_tenancy_settings()
    """
    return load_tenancy_settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_oidc_settings() -> OIDCSettings:
    """Get cached OIDC settings."""
    return OIDCSettings()
