"""Message publishers used by the outbox processor.

A publisher sends one stored event to the broker. It is given the raw type
tag and JSON content exactly as they sit in the outbox table and raises
:class:`~item_service.core.exceptions.PublishError` when delivery fails.

Connecting is separate from publishing. The processor calls
``ensure_connected`` once per non-empty batch, so a broker that is down only
fails the cycle and never counts against the attempts of individual rows.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from item_service.core.exceptions import PublishError
from item_service.infra.messaging.broker import start_broker, stop_broker
from item_service.infra.messaging.exchanges import ITEM_EVENTS_EXCHANGE, ITEM_EVENTS_QUEUE

if TYPE_CHECKING:
    from faststream.rabbit import RabbitBroker, RabbitExchange, RabbitQueue

logger = logging.getLogger(__name__)


@runtime_checkable
class MessagePublisher(Protocol):
    """Sends one event to the message broker."""

    async def ensure_connected(self) -> None:
        """Connect to the broker if not connected yet.

        Raises:
            PublishError: If the broker cannot be reached.
        """
        ...

    async def publish(self, type_tag: str, content: str) -> None:
        """Publish a single event.

        Raises:
            PublishError: If the broker did not accept the message.
        """
        ...


class RabbitMessagePublisher:
    """Publishes outbox content to RabbitMQ through FastStream.

    The broker is connected lazily, so a RabbitMQ outage at startup is retried
    on every processor cycle until it succeeds.

    The JSON content becomes the message body; the type tag travels as the
    AMQP ``type`` property and an ``x-event-type`` header so consumers can
    dispatch without parsing the body.
    """

    def __init__(
        self,
        broker: RabbitBroker,
        *,
        exchange: RabbitExchange = ITEM_EVENTS_EXCHANGE,
        queue: RabbitQueue = ITEM_EVENTS_QUEUE,
    ) -> None:
        self.broker = broker
        self.exchange = exchange
        self.queue = queue
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def ensure_connected(self) -> None:
        if self._connected:
            return
        try:
            await start_broker(self.broker)
        except Exception as e:
            raise PublishError(f"RabbitMQ unreachable: {e}") from e
        self._connected = True

    async def close(self) -> None:
        """Close the broker connection if it was opened."""
        if not self._connected:
            return
        await stop_broker(self.broker)
        self._connected = False

    async def publish(self, type_tag: str, content: str) -> None:
        try:
            body = json.loads(content)
        except json.JSONDecodeError as e:
            raise PublishError(f"Stored content is not valid JSON: {e}", event_type=type_tag) from e

        try:
            await self.broker.publish(
                body,
                queue=self.queue,
                exchange=self.exchange,
                message_type=type_tag,
                headers={"x-event-type": type_tag},
                persist=True,
            )
        except Exception as e:
            raise PublishError(f"Broker rejected {type_tag}: {e}", event_type=type_tag) from e

        logger.debug("Event published", extra={"event_type": type_tag, "queue": self.queue.name})
