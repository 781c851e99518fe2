"""Registry of known event kinds.

The registry maps type tags to event classes so outbox content can be decoded
back into typed events, for example by consumers or the ``outbox stats``
command.

Usage:
    @event_registry.register
    class ItemCreatedV1(DomainEvent):
        event_type: ClassVar[str] = "ItemCreatedV1"
        item_id: int

    event = event_registry.decode("ItemCreatedV1", '{"item_id": 1, ...}')
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from pydantic import ValidationError

from item_service.core.exceptions import SerializationError

if TYPE_CHECKING:
    from item_service.core.events.base import DomainEvent

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="DomainEvent")


class EventRegistry:
    """Mapping of event type tags to event classes.

    Registration is expected at import time; lookups are read-only afterwards.
    """

    def __init__(self) -> None:
        self._events: dict[str, type[DomainEvent]] = {}

    def register(self, event_class: type[T]) -> type[T]:
        """Register an event class. Usable as a decorator.

        Raises:
            ValueError: If the class has no ``event_type`` or the tag is
                already bound to a different class.
        """
        tag = event_class.event_type
        if not tag:
            msg = f"{event_class.__name__} must define event_type"
            raise ValueError(msg)
        existing = self._events.get(tag)
        if existing is not None and existing is not event_class:
            msg = f"Event type {tag!r} already registered to {existing.__name__}"
            raise ValueError(msg)
        self._events[tag] = event_class
        logger.debug("Registered event type", extra={"event_type": tag})
        return event_class

    def get(self, type_tag: str) -> type[DomainEvent] | None:
        return self._events.get(type_tag)

    def get_or_raise(self, type_tag: str) -> type[DomainEvent]:
        """Look up an event class.

        Raises:
            KeyError: If the tag is unknown.
        """
        event_class = self._events.get(type_tag)
        if event_class is None:
            msg = f"Unknown event type: {type_tag}"
            raise KeyError(msg)
        return event_class

    def decode(self, type_tag: str, content: str) -> DomainEvent:
        """Rebuild a typed event from its stored tag and JSON content.

        Raises:
            KeyError: If the tag is unknown.
            SerializationError: If the content does not match the event schema.
        """
        event_class = self.get_or_raise(type_tag)
        try:
            return event_class.model_validate_json(content)
        except ValidationError as e:
            raise SerializationError(
                f"Content does not match {type_tag}: {e.error_count()} error(s)",
                event_type=type_tag,
            ) from e

    def list_types(self) -> list[str]:
        return sorted(self._events)

    def __contains__(self, type_tag: object) -> bool:
        return type_tag in self._events

    def __len__(self) -> int:
        return len(self._events)


event_registry = EventRegistry()
