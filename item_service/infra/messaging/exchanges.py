"""FastStream exchange and queue definitions for domain events.

Events go to one durable direct exchange and are routed by queue name to one
durable queue.
"""

from __future__ import annotations

from faststream.rabbit import ExchangeType, RabbitExchange, RabbitQueue

from item_service.core.settings import get_rabbit_settings

rabbit_settings = get_rabbit_settings()

ITEM_EVENTS_EXCHANGE = RabbitExchange(
    name=rabbit_settings.exchange_name,
    type=ExchangeType.DIRECT,
    durable=True,
    auto_delete=False,
)

ITEM_EVENTS_QUEUE = RabbitQueue(
    name=rabbit_settings.queue_name,
    durable=True,
    auto_delete=False,
    routing_key=rabbit_settings.queue_name,
)
