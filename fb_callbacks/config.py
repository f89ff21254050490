"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fb_callbacks.constants import (
    AUTH_FAILURE_STATUS_CHOICES,
    DEFAULT_DEAUTH_PATH_PREFIX,
    DEFAULT_WEBHOOK_PATH_PREFIX,
    MAX_BODY_BYTES,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Facebook Configuration (single-tenant defaults for StaticCredentials)
    facebook_app_id: int | None = Field(
        default=None, description="Facebook App ID served by this instance"
    )
    facebook_app_secret: str | None = Field(
        default=None, description="Facebook App secret used to verify signatures"
    )
    facebook_verify_token: str | None = Field(
        default=None, description="Webhook subscription verify token"
    )

    # Routing
    deauth_path_prefix: str = Field(
        default=DEFAULT_DEAUTH_PATH_PREFIX,
        description="Path prefix of the login deauthorization callback",
    )
    webhook_path_prefix: str = Field(
        default=DEFAULT_WEBHOOK_PATH_PREFIX,
        description="Path prefix of the webhooks endpoint",
    )
    max_body_bytes: int = Field(
        default=MAX_BODY_BYTES, description="Largest accepted request body (bytes)"
    )

    # Status returned for signature mismatch / unsupported algorithm.
    # 500 matches the platform reference libraries.
    auth_failure_status: int = Field(
        default=500,
        description="HTTP status for signature and algorithm failures",
    )

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )

    @field_validator("auth_failure_status")
    @classmethod
    def _check_auth_failure_status(cls, value: int) -> int:
        if value not in AUTH_FAILURE_STATUS_CHOICES:
            raise ValueError(
                f"auth_failure_status must be one of {AUTH_FAILURE_STATUS_CHOICES}"
            )
        return value

    @field_validator("deauth_path_prefix", "webhook_path_prefix")
    @classmethod
    def _strip_slashes(cls, value: str) -> str:
        value = value.strip("/")
        if not value:
            raise ValueError("path prefix must not be empty")
        return value

    @model_validator(mode="after")
    def _check_distinct_prefixes(self) -> "Settings":
        if self.deauth_path_prefix == self.webhook_path_prefix:
            raise ValueError("deauth_path_prefix and webhook_path_prefix must differ")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
