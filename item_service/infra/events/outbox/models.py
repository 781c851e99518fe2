"""OutboxMessage model for the transactional outbox.

Rows are written in the same transaction as the entity change they describe,
so either both are stored or neither is. The outbox processor reads pending
rows in insertion order and publishes them to the broker.

A row is pending while ``processed_at`` is null. A pending row whose
``attempts`` reached the configured cap is parked: it stays pending but the
processor no longer picks it up until it is requeued.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from item_service.core.database.base import Base, IntegerPKMixin, utcnow

LAST_ERROR_MAX_LENGTH = 1000


class OutboxMessage(Base, IntegerPKMixin):
    """Pending or delivered domain event.

    Attributes:
        id: Auto-incrementing primary key, breaks ties on ``created_at``
        type: Event type tag (e.g. "ItemCreatedV1")
        content: JSON-encoded event payload
        created_at: Insertion time, never modified
        processed_at: When the event was published, null while pending
        attempts: Number of failed publish attempts
        last_error: Message of the most recent publish failure
    """

    __tablename__ = "outbox_messages"

    type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Event type tag",
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="JSON-encoded event payload",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="Insertion time",
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="Publish time; null while pending",
    )
    attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="Failed publish attempts",
    )
    last_error: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Most recent publish failure",
    )

    __table_args__ = (
        # Drain query: pending rows oldest first
        Index("ix_outbox_messages_pending", "processed_at", "created_at", "id"),
    )

    @property
    def is_pending(self) -> bool:
        return self.processed_at is None

    def record_failure(self, error: str) -> None:
        """Count a failed publish and keep the (truncated) error text."""
        self.attempts = (self.attempts or 0) + 1
        self.last_error = error[:LAST_ERROR_MAX_LENGTH]

    def __repr__(self) -> str:
        return (
            f"<OutboxMessage(id={self.id}, type={self.type!r}, "
            f"processed_at={self.processed_at}, attempts={self.attempts})>"
        )
