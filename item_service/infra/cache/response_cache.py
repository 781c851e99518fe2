"""Cache-aside storage for API responses.

Reads check the cache first and fall through to the loader on a miss, then
store the loaded value with a fixed TTL. Writes invalidate by key pattern
after their transaction commits.

The cache is an optimization only. Any cache failure is logged and bypassed:
reads fall back to the loader and failed invalidations are ignored, leaving
stale entries to expire with their TTL.

A read that misses before a write commits can store its (now stale) result
after the write's invalidation ran. Entries are not versioned against this;
staleness is bounded by the TTL.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError

from item_service.core.exceptions import CacheError
from item_service.infra.metrics.prometheus import cache_errors_total, cache_invalidations_total

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from item_service.infra.cache.redis import RedisCache

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class ResponseCache:
    """Cache-aside wrapper around :class:`RedisCache`.

    Passing ``cache=None`` disables caching: every read calls the loader and
    invalidation is a no-op.
    """

    def __init__(self, cache: RedisCache | None) -> None:
        self.cache = cache

    @property
    def enabled(self) -> bool:
        return self.cache is not None

    async def get_or_populate(
        self,
        key: str,
        loader: Callable[[], Awaitable[M]],
        *,
        ttl: int,
        model: type[M],
    ) -> M:
        """Return the cached response for ``key`` or load and cache it.

        On a hit the loader is not called.

        Args:
            key: Cache key.
            loader: Coroutine function producing the response from the store.
            ttl: Seconds the stored entry lives.
            model: Response model used to rebuild the cached JSON.

        Returns:
            The cached or freshly loaded response.
        """
        if self.cache is None:
            return await loader()

        try:
            cached = await self.cache.get(key)
        except CacheError as e:
            cache_errors_total.labels(cache_name="redis", operation="get").inc()
            logger.warning("Cache read failed, using store", extra={"key": key, "error": str(e)})
            cached = None

        if cached is not None:
            try:
                return model.model_validate(cached)
            except ValidationError:
                logger.warning("Discarding malformed cache entry", extra={"key": key})

        value = await loader()

        try:
            await self.cache.set(key, value.model_dump(mode="json"), ttl=ttl)
        except CacheError as e:
            cache_errors_total.labels(cache_name="redis", operation="set").inc()
            logger.warning("Cache write failed", extra={"key": key, "error": str(e)})

        return value

    async def invalidate(self, pattern: str) -> int:
        """Remove every entry matching ``pattern``. Failures are logged only.

        Returns:
            Number of keys removed, 0 when the cache is disabled or failed.
        """
        if self.cache is None:
            return 0

        try:
            removed = await self.cache.delete_pattern(pattern)
        except CacheError as e:
            cache_errors_total.labels(cache_name="redis", operation="invalidate").inc()
            logger.warning("Cache invalidation failed", extra={"pattern": pattern, "error": str(e)})
            return 0

        cache_invalidations_total.labels(pattern=pattern).inc(removed)
        logger.debug("Cache invalidated", extra={"pattern": pattern, "removed": removed})
        return removed
