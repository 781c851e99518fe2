"""Transactional outbox: model, repository and background processor."""

from __future__ import annotations

from .models import OutboxMessage
from .processor import CycleResult, OutboxProcessor, ProcessorState
from .repository import OutboxRepository

__all__ = [
    "CycleResult",
    "OutboxMessage",
    "OutboxProcessor",
    "OutboxRepository",
    "ProcessorState",
]
