"""Cache management commands."""

from __future__ import annotations

import asyncio
import sys

import click

from item_service.core.exceptions import CacheError
from item_service.features.items.cache import ITEMS_PAGE_PATTERN


@click.group()
def cache() -> None:
    """Redis response cache operations."""


@cache.command()
@click.option("--pattern", default=ITEMS_PAGE_PATTERN, show_default=True, help="Key glob to delete.")
def clear(pattern: str) -> None:
    """Delete cached responses matching a pattern."""
    from item_service.infra.cache.redis import RedisCache

    async def _clear() -> int:
        redis_cache = RedisCache()
        await redis_cache.connect()
        try:
            return await redis_cache.delete_pattern(pattern)
        finally:
            await redis_cache.disconnect()

    try:
        removed = asyncio.run(_clear())
    except CacheError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)
    click.echo(f"✓ Removed {removed} key(s) matching {pattern}")
