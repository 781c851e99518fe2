"""Redis cache settings."""

from __future__ import annotations

from typing import Any

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """Redis connection settings.

    Environment variables use REDIS_ prefix.
    Example: REDIS_URL="redis://localhost:6379/0"
    """

    enabled: bool = Field(default=True, description="Enable the Redis response cache.")

    redis_url: str | None = Field(
        default=None,
        alias="REDIS_URL",
        description="Full Redis URL; overrides the component fields.",
    )
    host: str = Field(default="localhost")
    port: int = Field(default=6379, ge=1, le=65535)
    db: int = Field(default=0, ge=0, le=15)
    password: SecretStr | None = Field(default=None)

    max_connections: int = Field(default=50, ge=1, le=1000)
    socket_timeout: float = Field(default=5.0, ge=0.1, le=30.0)
    socket_connect_timeout: float = Field(default=5.0, ge=0.1, le=30.0)

    key_prefix: str = Field(
        default="",
        max_length=50,
        description="Prefix prepended to every cache key (e.g. 'items-svc:').",
    )

    max_retries: int = Field(default=3, ge=1, le=10, description="Attempts per cache call.")
    retry_delay: float = Field(default=0.1, ge=0.0, le=5.0)

    startup_require_cache: bool = Field(
        default=False,
        description="Fail startup when Redis is unreachable instead of running without a cache.",
    )

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
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
        if self.redis_url:
            return self.redis_url
        auth = ""
        if self.password is not None:
            auth = f":{self.password.get_secret_value()}@"
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"

    @property
    def is_configured(self) -> bool:
        return self.enabled

    def connection_pool_kwargs(self) -> dict[str, Any]:
        return {
            "max_connections": self.max_connections,
            "socket_timeout": self.socket_timeout,
            "socket_connect_timeout": self.socket_connect_timeout,
            "decode_responses": True,
        }

    def get_prefixed_key(self, key: str) -> str:
        """Apply the configured key prefix.

        Args:
            key: Unprefixed cache key or glob pattern.

        Returns:
            Key with ``key_prefix`` prepended.
        """
        return f"{self.key_prefix}{key}"
