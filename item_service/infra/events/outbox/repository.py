"""Queries over the outbox table.

Provides methods for:
- Fetching pending messages in insertion order
- Flagging messages as processed or failed (in memory, persisted by the caller)
- Reporting, requeueing and purging
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import ColumnElement, delete, func, select, update

from item_service.core.database.base import utcnow
from item_service.infra.events.outbox.models import OutboxMessage

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


def _eligible(max_attempts: int) -> ColumnElement[bool]:
    """Pending rows that still have attempts left. ``0`` means no cap."""
    condition = OutboxMessage.processed_at.is_(None)
    if max_attempts > 0:
        condition = condition & (OutboxMessage.attempts < max_attempts)
    return condition


def _parked(max_attempts: int) -> ColumnElement[bool]:
    return OutboxMessage.processed_at.is_(None) & (OutboxMessage.attempts >= max_attempts)


class OutboxRepository:
    """Data access for :class:`OutboxMessage` rows.

    Flag changes (``mark_processed``/``mark_failed``) mutate the loaded
    instances only. The processor persists a whole batch with one commit.
    """

    async def fetch_pending(
        self,
        session: AsyncSession,
        *,
        batch_size: int = 50,
        max_attempts: int = 0,
    ) -> Sequence[OutboxMessage]:
        """Fetch the oldest pending messages.

        Args:
            session: Database session
            batch_size: Maximum number of rows to return
            max_attempts: Skip rows that already failed this many times
                (0 disables the cap)

        Returns:
            Pending rows ordered by ``created_at``, then ``id``
        """
        stmt = (
            select(OutboxMessage)
            .where(_eligible(max_attempts))
            .order_by(OutboxMessage.created_at.asc(), OutboxMessage.id.asc())
            .limit(batch_size)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    def mark_processed(self, message: OutboxMessage, *, at: datetime | None = None) -> None:
        message.processed_at = at or utcnow()

    def mark_failed(self, message: OutboxMessage, error: str) -> None:
        """Record a failed attempt; ``processed_at`` stays null."""
        message.record_failure(error)

    async def count_pending(self, session: AsyncSession) -> int:
        """Count every unprocessed row, parked ones included."""
        stmt = select(func.count()).select_from(OutboxMessage).where(
            OutboxMessage.processed_at.is_(None)
        )
        return (await session.execute(stmt)).scalar_one()

    async def count_parked(self, session: AsyncSession, *, max_attempts: int) -> int:
        """Count pending rows that exhausted their attempts."""
        if max_attempts <= 0:
            return 0
        stmt = select(func.count()).select_from(OutboxMessage).where(_parked(max_attempts))
        return (await session.execute(stmt)).scalar_one()

    async def count_processed(self, session: AsyncSession) -> int:
        stmt = select(func.count()).select_from(OutboxMessage).where(
            OutboxMessage.processed_at.is_not(None)
        )
        return (await session.execute(stmt)).scalar_one()

    async def list_parked(
        self,
        session: AsyncSession,
        *,
        max_attempts: int,
        limit: int = 100,
    ) -> Sequence[OutboxMessage]:
        if max_attempts <= 0:
            return []
        stmt = (
            select(OutboxMessage)
            .where(_parked(max_attempts))
            .order_by(OutboxMessage.created_at.asc(), OutboxMessage.id.asc())
            .limit(limit)
        )
        return (await session.execute(stmt)).scalars().all()

    async def requeue(
        self,
        session: AsyncSession,
        *,
        message_ids: Sequence[int] | None = None,
    ) -> int:
        """Reset the attempt counter of pending rows so they are retried.

        Args:
            session: Database session
            message_ids: Rows to requeue; all pending rows with failures when None

        Returns:
            Number of rows updated (not committed)
        """
        stmt = (
            update(OutboxMessage)
            .where(OutboxMessage.processed_at.is_(None), OutboxMessage.attempts > 0)
            .values(attempts=0, last_error=None)
        )
        if message_ids is not None:
            stmt = stmt.where(OutboxMessage.id.in_(list(message_ids)))
        result = await session.execute(stmt)
        return result.rowcount or 0

    async def purge_processed(
        self,
        session: AsyncSession,
        *,
        older_than: timedelta,
    ) -> int:
        """Delete processed rows whose ``processed_at`` is older than the window.

        Pending rows are never deleted.

        Returns:
            Number of rows deleted (not committed)
        """
        cutoff = utcnow() - older_than
        stmt = delete(OutboxMessage).where(
            OutboxMessage.processed_at.is_not(None),
            OutboxMessage.processed_at < cutoff,
        )
        result = await session.execute(stmt)
        return result.rowcount or 0
