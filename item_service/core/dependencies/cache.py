"""Cache dependencies for FastAPI route handlers."""

from __future__ import annotations

from fastapi import Request

from item_service.infra.cache.response_cache import ResponseCache


def get_response_cache(request: Request) -> ResponseCache:
    """Response cache bound to the Redis client opened by the lifespan.

    Caching is disabled (reads go to the store) when Redis is not connected.
    """
    return ResponseCache(getattr(request.app.state, "cache", None))
