"""Application lifespan: opens infrastructure and owns the outbox processor.

Startup order: logging, database, cache, broker, outbox processor.
Shutdown runs in reverse. Everything opened here is stored on ``app.state``
so request handlers and the readiness probe can reach it.

When RabbitMQ is enabled the processor always starts. A broker that is down
at startup is reconnected by the processor on each cycle.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from item_service.core.exceptions import CacheError, PublishError
from item_service.core.settings import (
    get_app_settings,
    get_outbox_settings,
    get_rabbit_settings,
    get_redis_settings,
)
from item_service.infra.cache.redis import RedisCache
from item_service.infra.database import AsyncSessionLocal, close_database, init_database
from item_service.infra.events.outbox.processor import OutboxProcessor
from item_service.infra.logging import setup_logging
from item_service.infra.messaging import RabbitMessagePublisher, create_broker

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def _start_cache() -> RedisCache | None:
    redis_settings = get_redis_settings()
    if not redis_settings.is_configured:
        logger.info("Redis not configured, response caching disabled")
        return None

    cache = RedisCache(redis_settings)
    try:
        await cache.connect()
    except CacheError:
        if redis_settings.startup_require_cache:
            raise
        logger.warning("Redis unavailable, continuing without response cache", exc_info=True)
        return None
    return cache


async def _start_publisher() -> RabbitMessagePublisher | None:
    """Build the publisher and try to connect once.

    A failed connection is fatal only with ``RABBIT_STARTUP_REQUIRE_RABBIT``;
    otherwise the outbox processor keeps retrying it every cycle.
    """
    rabbit_settings = get_rabbit_settings()
    broker = create_broker(rabbit_settings)
    if broker is None:
        return None

    publisher = RabbitMessagePublisher(broker)
    try:
        await publisher.ensure_connected()
    except PublishError:
        if rabbit_settings.startup_require_rabbit:
            raise
        logger.warning(
            "RabbitMQ unavailable at startup, the outbox processor will keep retrying",
            exc_info=True,
        )
    return publisher


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start infrastructure on startup and release it on shutdown."""
    setup_logging()
    app_settings = get_app_settings()
    outbox_settings = get_outbox_settings()

    logger.info(
        "Starting application",
        extra={"service": app_settings.service_name, "version": app_settings.version},
    )

    await init_database()
    app.state.cache = await _start_cache()
    app.state.publisher = await _start_publisher()
    app.state.outbox_processor = None

    if app.state.publisher is not None and outbox_settings.enabled:
        processor = OutboxProcessor.from_settings(
            outbox_settings,
            AsyncSessionLocal,
            app.state.publisher,
        )
        await processor.start()
        app.state.outbox_processor = processor
    else:
        logger.info("Outbox processor not started")

    try:
        yield
    finally:
        logger.info("Shutting down application")
        if app.state.outbox_processor is not None:
            await app.state.outbox_processor.stop()
        if app.state.publisher is not None:
            await app.state.publisher.close()
        if app.state.cache is not None:
            await app.state.cache.disconnect()
        await close_database()
