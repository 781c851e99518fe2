"""Outbox processor settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OutboxSettings(BaseSettings):
    """Settings for draining the transactional outbox.

    Environment variables use OUTBOX_ prefix.
    Example: OUTBOX_BATCH_SIZE=50, OUTBOX_POLL_INTERVAL=10
    """

    enabled: bool = Field(default=True, description="Run the outbox processor in the API process.")
    batch_size: int = Field(default=50, ge=1, le=1000, description="Rows fetched per cycle.")
    poll_interval: float = Field(
        default=10.0,
        gt=0.0,
        le=3600.0,
        description="Seconds to sleep between cycles.",
    )
    max_attempts: int = Field(
        default=10,
        ge=0,
        description="Failed publishes before a row is parked. 0 retries forever.",
    )
    shutdown_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Seconds to wait for the loop to finish before cancelling it.",
    )
    retention_days: int = Field(
        default=7,
        ge=0,
        description="Processed rows older than this are removed by 'outbox purge'.",
    )

    model_config = SettingsConfigDict(
        env_prefix="OUTBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
