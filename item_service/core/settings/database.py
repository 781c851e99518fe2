"""Relational store settings."""

from __future__ import annotations

from typing import Any

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Primary store connection settings.

    Environment variables use DB_ prefix. A full SQLAlchemy URL can be
    provided through DATABASE_URL; otherwise it is built from components.

    When ``enabled`` is false the service falls back to a local SQLite
    database via aiosqlite, which is what the test suite runs against.
    """

    enabled: bool = Field(default=True, description="Use PostgreSQL as the primary store.")

    dsn: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full SQLAlchemy URL; overrides the component fields.",
    )

    host: str = Field(default="localhost", description="PostgreSQL host.")
    port: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port.")
    user: str = Field(default="postgres", description="PostgreSQL user.")
    password: SecretStr = Field(default=SecretStr("postgres"), description="PostgreSQL password.")
    name: str = Field(default="items", description="Database name.")

    sqlite_path: str = Field(
        default="./item_service.db",
        description="SQLite file used when PostgreSQL is disabled.",
    )

    # ──────────────────────────────────────────────────────────────
    # Pool
    # ──────────────────────────────────────────────────────────────

    pool_size: int = Field(default=10, ge=1, le=200)
    max_overflow: int = Field(default=10, ge=0, le=200)
    pool_timeout: float = Field(default=30.0, ge=1.0, le=300.0)
    pool_pre_ping: bool = Field(default=True)
    echo: bool = Field(default=False, description="Log SQL statements.")

    startup_max_retries: int = Field(default=5, ge=1, le=50)
    startup_retry_delay: float = Field(default=1.0, ge=0.0, le=30.0)

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def url(self) -> str:
        """SQLAlchemy async URL for the configured store."""
        if not self.enabled:
            return f"sqlite+aiosqlite:///{self.sqlite_path}"
        if self.dsn:
            return self.dsn
        password = self.password.get_secret_value()
        return f"postgresql+psycopg://{self.user}:{password}@{self.host}:{self.port}/{self.name}"

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def engine_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``create_async_engine``.

        SQLite does not accept the queue pool arguments, so only ``echo`` is
        passed through for it.
        """
        if self.is_sqlite:
            return {"echo": self.echo}
        return {
            "echo": self.echo,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_timeout": self.pool_timeout,
            "pool_pre_ping": self.pool_pre_ping,
        }
