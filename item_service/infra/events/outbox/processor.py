"""Background processor that drains the outbox to the message broker.

Each cycle:
1. Fetches up to ``batch_size`` pending rows, oldest first
2. Publishes each row; success sets ``processed_at``, failure counts an attempt
3. Persists every flag change of the batch with one commit
4. Sleeps ``poll_interval`` seconds, waking early when stopped

A publish failure only affects its own row, which is retried on a later cycle
until it reaches ``max_attempts`` and is parked. A store failure or an
unreachable broker aborts the whole cycle without counting any attempt; it
is logged and the next cycle runs after the usual interval.

The processor is owned by whoever starts it (the application lifespan or the
``outbox run`` command). Stopping lets an in-flight publish finish, skips the
rest of the batch and still persists the flags already changed.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from enum import Enum
import logging
from typing import TYPE_CHECKING

from item_service.infra.events.outbox.repository import OutboxRepository
from item_service.infra.metrics.prometheus import (
    outbox_batch_size,
    outbox_cycle_errors_total,
    outbox_messages_failed_total,
    outbox_messages_parked_total,
    outbox_messages_published_total,
    outbox_pending_messages,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from item_service.core.settings import OutboxSettings
    from item_service.infra.events.outbox.models import OutboxMessage
    from item_service.infra.messaging.publisher import MessagePublisher

logger = logging.getLogger(__name__)


class ProcessorState(str, Enum):
    """Where the processor loop currently is."""

    IDLE = "idle"
    DRAINING = "draining"
    PERSISTING = "persisting"
    SLEEPING = "sleeping"
    STOPPED = "stopped"


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one processor cycle."""

    fetched: int = 0
    published: int = 0
    failed: int = 0
    parked: int = 0


class OutboxProcessor:
    """Polls the outbox and publishes pending messages.

    Attributes:
        batch_size: Rows fetched per cycle
        poll_interval: Seconds between cycles
        max_attempts: Failed publishes before a row is parked (0 = never)
        shutdown_timeout: Seconds ``stop`` waits before cancelling the loop
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        publisher: MessagePublisher,
        *,
        batch_size: int = 50,
        poll_interval: float = 10.0,
        max_attempts: int = 10,
        shutdown_timeout: float = 30.0,
        repository: OutboxRepository | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.publisher = publisher
        self.batch_size = batch_size
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.shutdown_timeout = shutdown_timeout
        self.repository = repository or OutboxRepository()

        self.state = ProcessorState.IDLE
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: OutboxSettings,
        session_factory: async_sessionmaker[AsyncSession],
        publisher: MessagePublisher,
    ) -> OutboxProcessor:
        return cls(
            session_factory,
            publisher,
            batch_size=settings.batch_size,
            poll_interval=settings.poll_interval,
            max_attempts=settings.max_attempts,
            shutdown_timeout=settings.shutdown_timeout,
        )

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    async def start(self) -> None:
        """Run the loop as a background task."""
        if self.is_running:
            logger.warning("Outbox processor already running")
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self.run(), name="outbox-processor")
        logger.info(
            "Outbox processor started",
            extra={
                "batch_size": self.batch_size,
                "poll_interval": self.poll_interval,
                "max_attempts": self.max_attempts,
            },
        )

    def request_stop(self) -> None:
        """Ask the loop to exit after the current publish without waiting for it."""
        self._stop_event.set()

    async def stop(self) -> None:
        """Signal the loop to stop and wait for it to finish its batch.

        Cancels the task if it does not exit within ``shutdown_timeout``.
        """
        self._stop_event.set()
        if self._task is None:
            return

        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=self.shutdown_timeout)
        except TimeoutError:
            logger.warning("Outbox processor shutdown timed out, cancelling")
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        self.state = ProcessorState.STOPPED
        logger.info("Outbox processor stopped")

    async def run(self) -> None:
        """Process cycles until :meth:`stop` is called or the task is cancelled."""
        try:
            while not self.stop_requested:
                try:
                    await self.run_cycle()
                except Exception:
                    outbox_cycle_errors_total.inc()
                    logger.exception("Outbox cycle failed, retrying after poll interval")

                if self.stop_requested:
                    break
                await self._sleep()
        finally:
            self.state = ProcessorState.STOPPED

    async def run_cycle(self) -> CycleResult:
        """Drain one batch and persist its flags with a single commit.

        Returns:
            Counts for the batch.

        Raises:
            SQLAlchemyError: If fetching or persisting fails.
            PublishError: If the broker cannot be connected. Failures of
                individual publishes never propagate.
        """
        published = failed = parked = 0

        async with self.session_factory() as session:
            self.state = ProcessorState.DRAINING
            messages = await self.repository.fetch_pending(
                session,
                batch_size=self.batch_size,
                max_attempts=self.max_attempts,
            )
            outbox_batch_size.observe(len(messages))

            if not messages:
                self.state = ProcessorState.IDLE
                return CycleResult()

            # A broker outage fails the whole cycle without touching row attempts
            await self.publisher.ensure_connected()

            logger.debug("Processing outbox batch", extra={"batch_size": len(messages)})

            for message in messages:
                if self.stop_requested:
                    logger.info(
                        "Stop requested, leaving rest of batch for next run",
                        extra={"skipped": len(messages) - published - failed},
                    )
                    break
                if await self._publish_one(message):
                    published += 1
                else:
                    failed += 1
                    if self._is_parked(message):
                        parked += 1

            self.state = ProcessorState.PERSISTING
            await session.commit()

            outbox_pending_messages.set(await self.repository.count_pending(session))

        if published or failed:
            logger.info(
                "Outbox batch processed",
                extra={
                    "published": published,
                    "failed": failed,
                    "parked": parked,
                    "total": len(messages),
                },
            )
        self.state = ProcessorState.IDLE
        return CycleResult(fetched=len(messages), published=published, failed=failed, parked=parked)

    async def _publish_one(self, message: OutboxMessage) -> bool:
        try:
            await self.publisher.publish(message.type, message.content)
        except Exception as e:
            self.repository.mark_failed(message, str(e) or type(e).__name__)
            outbox_messages_failed_total.labels(event_type=message.type).inc()
            logger.warning(
                "Failed to publish outbox message, will retry",
                extra={
                    "message_id": message.id,
                    "event_type": message.type,
                    "attempts": message.attempts,
                    "error": str(e),
                },
            )
            if self._is_parked(message):
                outbox_messages_parked_total.labels(event_type=message.type).inc()
                logger.error(
                    "Outbox message parked after exhausting attempts",
                    extra={
                        "message_id": message.id,
                        "event_type": message.type,
                        "attempts": message.attempts,
                    },
                )
            return False

        self.repository.mark_processed(message)
        outbox_messages_published_total.labels(event_type=message.type).inc()
        return True

    def _is_parked(self, message: OutboxMessage) -> bool:
        return self.max_attempts > 0 and message.attempts >= self.max_attempts

    async def _sleep(self) -> None:
        self.state = ProcessorState.SLEEPING
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_interval)


__all__ = ["CycleResult", "OutboxProcessor", "ProcessorState"]
