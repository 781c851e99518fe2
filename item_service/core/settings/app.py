"""Application-level settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Core application settings.

    Environment variables use APP_ prefix.
    Example: APP_DEBUG=true, APP_API_PREFIX="/api/v1"
    """

    service_name: str = Field(
        default="item-service",
        min_length=1,
        max_length=100,
        description="Service name used in logs and health responses.",
    )
    title: str = Field(default="Item Service API", description="OpenAPI title.")
    version: str = Field(default="0.1.0", description="API version string.")
    api_prefix: str = Field(
        default="/api/v1",
        description="Prefix applied to all versioned API routes.",
    )

    # ──────────────────────────────────────────────────────────────
    # Server
    # ──────────────────────────────────────────────────────────────

    host: str = Field(default="0.0.0.0", description="Bind address for uvicorn.")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port for uvicorn.")
    reload: bool = Field(default=False, description="Enable uvicorn auto-reload.")
    debug: bool = Field(default=False, description="Enable debug mode.")

    docs_enabled: bool = Field(default=True, description="Expose /docs and /redoc.")

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
