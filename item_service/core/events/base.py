"""Domain event base class.

Domain events are immutable records of something that happened to an
aggregate. They are staged in the outbox inside the business transaction and
published to the broker afterwards.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict
from pydantic_core import PydanticSerializationError

from item_service.core.exceptions import SerializationError


class DomainEvent(BaseModel):
    """Base class for all domain events.

    Subclasses define:
    - event_type: ClassVar[str] - type tag stored with the outbox row
    - event_version: ClassVar[int] - schema version (default: 1)

    Example:
        class ItemCreatedV1(DomainEvent):
            event_type: ClassVar[str] = "ItemCreatedV1"

            item_id: int
            created_at: datetime
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    event_type: ClassVar[str] = ""
    event_version: ClassVar[int] = 1

    def to_json(self) -> str:
        """Encode the event payload for storage.

        Raises:
            SerializationError: If a field value cannot be encoded.
        """
        try:
            return self.model_dump_json()
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise SerializationError(
                f"Cannot encode event {self.event_type or type(self).__name__}: {e}",
                event_type=self.event_type or type(self).__name__,
            ) from e


def encode_event(event: Any, type_tag: str | None = None) -> tuple[str, str]:
    """Resolve the type tag and JSON content for any event value.

    Pydantic models are dumped in JSON mode; anything else goes through
    ``json.dumps`` and must be natively encodable.

    Args:
        event: Event instance, pydantic model, or JSON-compatible value.
        type_tag: Explicit tag. Defaults to the event's ``event_type`` or
            its class name.

    Returns:
        ``(type_tag, content)`` tuple.

    Raises:
        SerializationError: If the value cannot be encoded.
    """
    tag = type_tag or getattr(event, "event_type", "") or type(event).__name__
    if isinstance(event, DomainEvent):
        return tag, event.to_json()
    try:
        if isinstance(event, BaseModel):
            return tag, event.model_dump_json()
        return tag, json.dumps(event)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise SerializationError(f"Cannot encode event {tag}: {e}", event_type=tag) from e
