"""Logging configuration settings."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Structured logging configuration.

    Environment variables use LOG_ prefix.
    Example: LOG_LEVEL=INFO, LOG_JSON=true, LOG_FILE_PATH=logs/items.log
    """

    service_name: str = Field(
        default="item-service",
        description="Service name included as a static field in JSON records.",
    )
    level: LogLevel = Field(default="INFO", description="Root logger level.")
    json_logs: bool = Field(
        default=True,
        alias="LOG_JSON",
        description="Emit JSON Lines instead of human-readable text.",
    )
    console_enabled: bool = Field(default=True)
    file_path: str | None = Field(default=None, description="Optional rotating log file.")
    file_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)
    file_backup_count: int = Field(default=5, ge=0, le=100)
    capture_warnings: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Translate settings into ``configure_logging`` keyword arguments."""
        return {
            "log_level": self.level,
            "json_logs": self.json_logs,
            "console_enabled": self.console_enabled,
            "file_path": self.file_path,
            "file_max_bytes": self.file_max_bytes,
            "file_backup_count": self.file_backup_count,
            "capture_warnings": self.capture_warnings,
            "service_name": self.service_name,
        }
