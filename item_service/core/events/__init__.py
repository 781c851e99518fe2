"""Domain events and their registry.

Importing this package registers the item event kinds.
"""

from __future__ import annotations

from .base import DomainEvent, encode_event
from .items import ItemCreatedV1, ItemDeletedV1, ItemUpdatedV1
from .registry import EventRegistry, event_registry

__all__ = [
    "DomainEvent",
    "EventRegistry",
    "ItemCreatedV1",
    "ItemDeletedV1",
    "ItemUpdatedV1",
    "encode_event",
    "event_registry",
]
