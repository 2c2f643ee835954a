"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow"
    )

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False

    # Database
    database_url: str = "sqlite:///./bakery.db"
    database_auth_token: Optional[str] = None
    database_echo: bool = False

    # Cache
    cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_default_ttl: int = 300
    cache_max_entries: int = Field(10000, ge=1)

    # Security
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Rate limiting / timeouts
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 120
    rate_limit_max_keys: int = 10000
    request_timeout_seconds: float = 5.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Sentry
    sentry_dsn: Optional[str] = None

    # Environment
    environment: str = "development"

    # Application
    app_name: str = "Bakery API"
    app_version: str = "1.0.0"
    debug: bool = False

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Refuse to start with an empty signing secret."""
        if not v or not v.strip():
            raise ValueError("SECRET_KEY must not be empty")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
