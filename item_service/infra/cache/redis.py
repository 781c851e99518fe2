"""Redis cache client with retry and connection pooling.

Values are stored as JSON. Every key passes through the configured
``key_prefix``. Transient connection errors are retried; anything still
failing surfaces as :class:`~item_service.core.exceptions.CacheError`.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any, cast

from opentelemetry import trace
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from item_service.core.exceptions import CacheError
from item_service.core.settings import get_redis_settings
from item_service.infra.metrics.prometheus import (
    cache_hits_total,
    cache_misses_total,
    cache_operation_duration_seconds,
)
from item_service.utils.retry import retry

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from item_service.core.settings import RedisSettings

logger = logging.getLogger(__name__)
redis_settings = get_redis_settings()

CACHE_NAME = "redis"

_transient = retry(
    max_attempts=redis_settings.max_retries,
    initial_delay=redis_settings.retry_delay,
    max_delay=2.0,
    exceptions=(RedisConnectionError, RedisTimeoutError),
)


def _trace_exemplar() -> dict[str, str] | None:
    span = trace.get_current_span()
    if span and span.get_span_context().is_valid:
        return {"trace_id": format(span.get_span_context().trace_id, "032x")}
    return None


class RedisCache:
    """Redis cache client.

    Example:
        cache = RedisCache()
        await cache.connect()

        await cache.set("items:page:1:size:10", {"items": []}, ttl=300)
        value = await cache.get("items:page:1:size:10")
        await cache.delete_pattern("items:page:*")

        await cache.disconnect()
    """

    def __init__(self, settings: RedisSettings | None = None, client: Redis | None = None) -> None:
        """Initialize the client.

        Args:
            settings: Connection settings; defaults to the cached REDIS_ settings.
            client: Pre-built client, used as-is and never closed by ``disconnect``.
        """
        self.settings = settings or redis_settings
        self._pool: ConnectionPool | None = None
        self._client: Redis | None = client
        self._owns_client = client is None

    async def connect(self) -> None:
        """Open the connection pool and ping the server.

        Raises:
            CacheError: If Redis cannot be reached.
        """
        if self._client is not None:
            return

        logger.info(
            "Connecting to Redis",
            extra={"url": self.settings.url.split("@")[-1], "max_connections": self.settings.max_connections},
        )
        self._pool = ConnectionPool.from_url(self.settings.url, **self.settings.connection_pool_kwargs())
        self._client = Redis(connection_pool=self._pool)
        try:
            await cast("Awaitable[bool]", self._client.ping())
        except RedisError as e:
            await self.disconnect()
            raise CacheError(f"Redis unreachable: {e}") from e
        logger.info("Redis connection established")

    async def disconnect(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        if self._pool is not None:
            await self._pool.aclose()
        if self._owns_client:
            self._client = None
        self._pool = None
        logger.info("Redis connection closed")

    @property
    def client(self) -> Redis:
        """The underlying client.

        Raises:
            CacheError: If not connected.
        """
        if self._client is None:
            msg = "Redis client not connected. Call connect() first."
            raise CacheError(msg)
        return self._client

    def key(self, key: str) -> str:
        return self.settings.get_prefixed_key(key)

    async def get(self, key: str) -> Any | None:
        """Return the cached JSON value, or None on a miss.

        Raises:
            CacheError: If the read fails or the stored value is not JSON.
        """
        start = time.perf_counter()
        try:
            raw = await self._get(self.key(key))
        except RedisError as e:
            raise CacheError(f"Cache read failed: {e}", key=key) from e
        finally:
            cache_operation_duration_seconds.labels(operation="get", cache_name=CACHE_NAME).observe(
                time.perf_counter() - start
            )

        exemplar = _trace_exemplar()
        if raw is None:
            cache_misses_total.labels(cache_name=CACHE_NAME).inc(exemplar=exemplar)
            return None
        cache_hits_total.labels(cache_name=CACHE_NAME).inc(exemplar=exemplar)

        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise CacheError(f"Cached value is not JSON: {e}", key=key) from e

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store ``value`` as JSON, expiring after ``ttl`` seconds.

        Raises:
            CacheError: If the value cannot be encoded or the write fails.
        """
        try:
            payload = value if isinstance(value, str) else json.dumps(value)
        except (TypeError, ValueError) as e:
            raise CacheError(f"Value is not JSON serializable: {e}", key=key) from e

        start = time.perf_counter()
        try:
            result = await self._set(self.key(key), payload, ttl)
        except RedisError as e:
            raise CacheError(f"Cache write failed: {e}", key=key) from e
        finally:
            cache_operation_duration_seconds.labels(operation="set", cache_name=CACHE_NAME).observe(
                time.perf_counter() - start
            )
        return bool(result)

    async def delete(self, key: str) -> bool:
        try:
            result = await self._delete(self.key(key))
        except RedisError as e:
            raise CacheError(f"Cache delete failed: {e}", key=key) from e
        return bool(result)

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern using SCAN.

        Returns:
            Number of keys removed.

        Raises:
            CacheError: If scanning or deleting fails.
        """
        try:
            keys = [key async for key in self.client.scan_iter(match=self.key(pattern), count=500)]
            if not keys:
                return 0
            deleted = await self.client.delete(*keys)
        except RedisError as e:
            raise CacheError(f"Pattern delete failed: {e}", key=pattern) from e
        return int(deleted or 0)

    async def health_check(self) -> bool:
        try:
            await cast("Awaitable[bool]", self.client.ping())
        except (RedisError, CacheError):
            logger.exception("Redis health check failed")
            return False
        return True

    @_transient
    async def _get(self, key: str) -> str | None:
        return await self.client.get(key)

    @_transient
    async def _set(self, key: str, payload: str, ttl: int | None) -> Any:
        return await self.client.set(key, payload, ex=ttl)

    @_transient
    async def _delete(self, key: str) -> int:
        return await self.client.delete(key)
