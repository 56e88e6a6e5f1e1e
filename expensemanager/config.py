"""Centralized configuration for Expense Manager.

Uses Pydantic BaseSettings with environment variable loading and validation.
All EM_* environment variables are validated at import time.  The permission
table is deliberately not configurable here; it lives in ``rbac.py``.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = {"env_prefix": "EM_", "case_sensitive": False, "extra": "ignore"}

    # Logging
    log_format: str = Field(default="text", description="Log format: text or json")
    log_level: str = Field(default="INFO", description="Python log level")

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind host")  # noqa: S104
    port: int = Field(default=5000, ge=1, le=65535, description="Server bind port")

    # CORS
    cors_origins: str = Field(default="*", description="Comma-separated CORS origins")

    # Rate limiting
    rate_limit: str = Field(
        default="100/minute",
        description="Default rate limit (e.g., 100/minute). Set to 'none' to disable.",
    )

    # Auth
    jwt_secret: str = Field(default="", description="HS256 signing secret (empty = dev secret)")
    token_expiry_hours: int = Field(default=24, ge=1, description="Bearer token lifetime")
    remember_me_days: int = Field(
        default=30, ge=1, description="Bearer token lifetime when remember_me is set"
    )
    reset_token_minutes: int = Field(
        default=60, ge=1, description="Password reset token lifetime"
    )

    # Demo data
    seed_demo_users: bool = Field(
        default=False, description="Create one active account per role on startup"
    )
    demo_password: str = Field(default="password123", description="Password for demo accounts")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "json"):
            msg = f"EM_LOG_FORMAT must be 'text' or 'json', got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        import logging

        v = v.upper()
        if not isinstance(getattr(logging, v, None), int):
            msg = f"EM_LOG_LEVEL must be a valid Python log level, got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("rate_limit")
    @classmethod
    def validate_rate_limit(cls, v: str) -> str:
        v = v.strip()
        if v.lower() == "none":
            return "none"
        count, sep, period = v.partition("/")
        if not sep or not count.isdigit() or not period:
            msg = f"EM_RATE_LIMIT must look like '100/minute' or 'none', got '{v}'"
            raise ValueError(msg)
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        """Return parsed list of CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def rate_limit_enabled(self) -> bool:
        return self.rate_limit != "none"


# Validated at import time.
settings = Settings()
