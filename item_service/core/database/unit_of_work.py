"""Unit of Work over an async SQLAlchemy session.

A unit of work binds the entity write and the outbox insert that describes it
into a single commit. Handlers follow the same shape every time::

    await uow.begin()
    try:
        session.add(item)
        await session.flush()
        await uow.publish_domain_event(ItemCreatedV1(item_id=item.id))
        await uow.commit()
    except Exception:
        await uow.rollback()
        raise

Nothing staged through :meth:`UnitOfWork.publish_domain_event` is visible to
the outbox processor until :meth:`UnitOfWork.commit` succeeds.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from item_service.core.events.base import encode_event
from item_service.core.exceptions import TransactionError
from item_service.infra.events.outbox.models import OutboxMessage

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class UnitOfWork:
    """One business transaction on a session.

    The session may already be inside an implicit transaction (for example
    after a lookup); :meth:`begin` adopts it so the read and the write commit
    together.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    async def begin(self) -> None:
        """Start the transaction.

        Raises:
            TransactionError: If a transaction is already active on this unit
                of work or the store cannot be reached.
        """
        if self._active:
            raise TransactionError("A transaction is already active", operation="begin")
        try:
            if not self.session.in_transaction():
                await self.session.begin()
            # Acquire the connection now so an unreachable store fails here
            await self.session.connection()
        except SQLAlchemyError as e:
            raise TransactionError("Could not start a transaction", operation="begin") from e
        self._active = True

    async def publish_domain_event(self, event: Any, type_tag: str | None = None) -> OutboxMessage:
        """Stage an outbox row for ``event`` in the current transaction.

        Args:
            event: Domain event or any JSON-encodable value.
            type_tag: Explicit tag; defaults to the event's ``event_type``.

        Returns:
            The pending (not yet committed) outbox row.

        Raises:
            TransactionError: If no transaction is active.
            SerializationError: If the event cannot be encoded.
        """
        if not self._active:
            raise TransactionError("No active transaction", operation="publish_domain_event")
        tag, content = encode_event(event, type_tag)
        message = OutboxMessage(type=tag, content=content, processed_at=None, attempts=0)
        self.session.add(message)
        logger.debug("Staged outbox message", extra={"event_type": tag})
        return message

    async def commit(self) -> None:
        """Flush and commit every pending write atomically.

        On failure the transaction stays open; the caller decides whether to
        retry or roll back.

        Raises:
            TransactionError: On write conflict or lost connectivity, or if no
                transaction is active.
        """
        if not self._active:
            raise TransactionError("No active transaction", operation="commit")
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.warning("Commit failed", extra={"error": str(e)})
            raise TransactionError(operation="commit") from e
        self._active = False

    async def rollback(self) -> None:
        """Discard everything written since :meth:`begin`.

        Safe with no active transaction and after a failed commit. A failure
        while rolling back is logged, never raised, so it cannot replace the
        error that triggered the rollback.
        """
        self._active = False
        if not self.session.in_transaction():
            return
        try:
            await self.session.rollback()
        except Exception:
            logger.exception("Rollback failed")
