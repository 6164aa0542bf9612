"""
Application Settings.

Centralized configuration using Pydantic Settings with environment variable loading.
Every setting has a default so the service starts without a .env file.

Production Mode:
    When app_env="production", additional validations apply:
    - debug must be False
    - cors_allowed_origins cannot be ["*"]
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=False,
        description="Include error details in failure responses",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON lines (console renderer otherwise)",
    )
    api_host: str = Field(default="0.0.0.0", description="Bind address")
    api_port: int = Field(default=8000, description="Bind port")

    # -------------------------------------------------------------------------
    # Upstream Media API
    # -------------------------------------------------------------------------
    upstream_base_url: str = Field(
        default="https://downloader.ovrica.name.ng",
        description="Base URL of the third-party media extraction API",
    )
    upstream_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Wall-clock timeout for one upstream call",
    )
    upstream_max_retries: int = Field(
        default=2,
        ge=0,
        description="Retries after the first attempt on transient failures",
    )
    upstream_retry_backoff_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Backoff step; retry n waits n * step seconds",
    )
    health_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout for the upstream health probe",
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        description="User-Agent sent to the upstream API",
    )

    # -------------------------------------------------------------------------
    # Circuit Breaker
    # -------------------------------------------------------------------------
    circuit_breaker_failure_threshold: int = Field(
        default=5,
        ge=1,
        description="Consecutive failures before an upstream circuit opens",
    )
    circuit_breaker_recovery_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Seconds an open circuit waits before a recovery probe",
    )

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins. Use ['*'] for development only.",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production settings are safe."""
        if self.app_env == "production":
            errors = []

            if self.debug:
                errors.append("debug must be False in production")

            if "*" in self.cors_allowed_origins:
                errors.append("cors_allowed_origins cannot contain '*' in production")

            if errors:
                raise ValueError(
                    f"Production configuration errors: {'; '.join(errors)}"
                )

        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings if needed.
    """
    return Settings()
