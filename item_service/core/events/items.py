"""Events emitted by the items feature."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from pydantic import Field

from item_service.core.database.base import utcnow

from .base import DomainEvent
from .registry import event_registry


@event_registry.register
class ItemCreatedV1(DomainEvent):
    """An item was stored for the first time."""

    event_type: ClassVar[str] = "ItemCreatedV1"

    item_id: int
    created_at: datetime = Field(default_factory=utcnow)


@event_registry.register
class ItemUpdatedV1(DomainEvent):
    """An item's name or quantity changed."""

    event_type: ClassVar[str] = "ItemUpdatedV1"

    item_id: int
    updated_at: datetime = Field(default_factory=utcnow)


@event_registry.register
class ItemDeletedV1(DomainEvent):
    """An item was removed."""

    event_type: ClassVar[str] = "ItemDeletedV1"

    item_id: int
    deleted_at: datetime = Field(default_factory=utcnow)
