"""Response cache settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """TTLs for cached API responses.

    Environment variables use CACHE_ prefix.
    """

    items_ttl: int = Field(
        default=300,
        ge=1,
        le=86400,
        description="Seconds an items list page stays cached.",
    )

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
