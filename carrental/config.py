"""Centralized application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration for the bookings service.

    ``DATABASE_URL`` and ``JWT_SECRET`` have no defaults: constructing the
    settings without them fails before the application starts serving.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = Field(..., description="SQLAlchemy database URL.")
    run_db_migrations: bool = Field(
        default=False,
        description="Whether the service should create database tables on startup.",
    )
    jwt_secret: str = Field(..., min_length=1, description="JWT signing secret")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: Optional[int] = Field(
        default=None,
        gt=0,
        description="Token lifetime in minutes. Tokens carry no expiry when unset.",
    )
    password_hash_scheme: str = Field(default="bcrypt", description="passlib scheme used for password hashes")
    bcrypt_rounds: int = Field(default=12, ge=4, le=31, description="bcrypt work factor")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    default_rate_limit: str = Field(default="60/minute", description="Global rate limiting rule")
    rate_limiting_enabled: bool = Field(default=True, description="Toggle to disable SlowAPI limits (useful in tests)")
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics on /metrics")
    audit_log_dir: str = Field(default="logs", description="Directory for per-service audit logs")
    log_level: str = Field(default="INFO")

    host: str = "0.0.0.0"
    port: int = 3000


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""

    get_settings.cache_clear()
