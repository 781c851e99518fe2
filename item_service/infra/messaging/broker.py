"""RabbitMQ broker lifecycle using FastStream.

The broker is built and owned by whoever needs it (the application lifespan or
the ``outbox run`` command); there is no module-level instance.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from faststream.rabbit import RabbitBroker

from item_service.core.settings import get_rabbit_settings
from item_service.infra.messaging.exchanges import ITEM_EVENTS_EXCHANGE, ITEM_EVENTS_QUEUE

if TYPE_CHECKING:
    from item_service.core.settings import RabbitSettings

logger = logging.getLogger(__name__)


def create_broker(settings: RabbitSettings | None = None) -> RabbitBroker | None:
    """Build an unconnected broker, or None when RabbitMQ is disabled."""
    settings = settings or get_rabbit_settings()
    if not settings.is_configured:
        logger.warning("RabbitMQ not configured - event publishing disabled")
        return None
    return RabbitBroker(settings.url, logger=logger)


async def start_broker(broker: RabbitBroker) -> None:
    """Connect and declare the events exchange, queue and binding.

    Raises:
        Exception: Whatever the AMQP client raises when the broker is unreachable.
    """
    await broker.start()
    exchange = await broker.declare_exchange(ITEM_EVENTS_EXCHANGE)
    queue = await broker.declare_queue(ITEM_EVENTS_QUEUE)
    await queue.bind(exchange=exchange, routing_key=ITEM_EVENTS_QUEUE.name)
    logger.info(
        "RabbitMQ broker connected",
        extra={"exchange": ITEM_EVENTS_EXCHANGE.name, "queue": ITEM_EVENTS_QUEUE.name},
    )


async def stop_broker(broker: RabbitBroker) -> None:
    await broker.close()
    logger.info("RabbitMQ broker closed")
