"""Application configuration management using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Required settings will raise validation errors if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="freelance-marketplace", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=5000, description="Server port")
    max_request_body_size: int = Field(default=1_048_576, description="Maximum request body size in bytes")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins",
    )

    # Database
    database_url: str = Field(default="", description="Postgres connection string (migrations and tooling only)")

    # Supabase
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_secret_key: str = Field(..., description="Supabase secret key for backend operations")
    supabase_publishable_key: str = Field(default="", description="Supabase publishable key for client sign-in")
    supabase_signing_key_jwk: str = Field(
        default="",
        description="Supabase signing key JWK (JSON string) for identity provider token verification",
    )
    identity_provider_enabled: bool = Field(
        default=True,
        description="Create provider accounts on signup and accept provider-issued tokens",
    )

    # Local tokens
    jwt_secret: str = Field(..., description="Secret used to sign locally issued access tokens")
    jwt_expiry_seconds: int = Field(default=86400, description="Lifetime of locally issued access tokens")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"


class ClientSettings(BaseSettings):
    """Settings for the async marketplace client.

    Read from ``MARKETPLACE_``-prefixed environment variables so they never
    collide with the server settings when both run in one process.
    """

    model_config = SettingsConfigDict(
        env_prefix="MARKETPLACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_base_url: str = Field(default="http://localhost:5000", description="Marketplace API base URL")
    request_timeout_seconds: float = Field(default=10.0, description="HTTP request timeout")
    list_stale_seconds: float = Field(default=60.0, description="Age after which list reads refetch")
    chat_poll_seconds: float = Field(default=10.0, description="Refresh interval for the open chat thread")
    token_file: str = Field(default="~/.marketplace/token", description="Where the session token is persisted")
    supabase_url: str = Field(default="", description="Identity provider URL (empty disables provider sign-in)")
    supabase_publishable_key: str = Field(default="", description="Identity provider publishable key")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached using lru_cache for performance.
        Call get_settings.cache_clear() to reload settings.
    """
    return Settings()


@lru_cache
def get_client_settings() -> ClientSettings:
    """Get cached client settings singleton."""
    return ClientSettings()
