"""Messaging infrastructure: FastStream broker and event publishers."""

from __future__ import annotations

from .broker import create_broker, start_broker, stop_broker
from .publisher import MessagePublisher, RabbitMessagePublisher

__all__ = [
    "MessagePublisher",
    "RabbitMessagePublisher",
    "create_broker",
    "start_broker",
    "stop_broker",
]
