"""Outbox management commands."""

from __future__ import annotations

import asyncio
from datetime import timedelta
import signal
import sys
from typing import TYPE_CHECKING, Any

import click

from item_service.core.settings import get_outbox_settings
from item_service.infra.events.outbox.repository import OutboxRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


async def collect_stats(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    max_attempts: int,
) -> dict[str, Any]:
    """Counts of pending, parked and processed rows plus the oldest parked rows."""
    repo = OutboxRepository()
    async with session_factory() as session:
        parked = await repo.list_parked(session, max_attempts=max_attempts, limit=10)
        return {
            "pending": await repo.count_pending(session),
            "parked": await repo.count_parked(session, max_attempts=max_attempts),
            "processed": await repo.count_processed(session),
            "parked_sample": [
                {"id": m.id, "type": m.type, "attempts": m.attempts, "last_error": m.last_error}
                for m in parked
            ],
        }


async def requeue_messages(
    session_factory: async_sessionmaker[AsyncSession],
    message_ids: list[int] | None = None,
) -> int:
    repo = OutboxRepository()
    async with session_factory() as session:
        count = await repo.requeue(session, message_ids=message_ids)
        await session.commit()
    return count


async def purge_messages(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    older_than_days: int,
) -> int:
    repo = OutboxRepository()
    async with session_factory() as session:
        count = await repo.purge_processed(session, older_than=timedelta(days=older_than_days))
        await session.commit()
    return count


@click.group()
def outbox() -> None:
    """Transactional outbox operations."""


@outbox.command()
def run() -> None:
    """Run the outbox processor in the foreground until interrupted.

    RabbitMQ need not be up yet; the processor connects on its first batch
    and keeps retrying every poll interval.
    """
    from item_service.infra.database import AsyncSessionLocal, close_database, init_database
    from item_service.infra.events.outbox.processor import OutboxProcessor
    from item_service.infra.messaging import RabbitMessagePublisher, create_broker

    async def _run() -> None:
        broker = create_broker()
        if broker is None:
            click.echo("❌ RabbitMQ is not configured (RABBIT_ENABLED=false)", err=True)
            sys.exit(1)

        await init_database()
        publisher = RabbitMessagePublisher(broker)
        processor = OutboxProcessor.from_settings(get_outbox_settings(), AsyncSessionLocal, publisher)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, processor.request_stop)

        click.echo("Outbox processor running, press Ctrl+C to stop")
        try:
            await processor.run()
        finally:
            await publisher.close()
            await close_database()
        click.echo("✓ Outbox processor stopped")

    asyncio.run(_run())


@outbox.command()
def stats() -> None:
    """Show pending, parked and processed counts."""
    from item_service.infra.database import AsyncSessionLocal

    settings = get_outbox_settings()
    try:
        result = asyncio.run(collect_stats(AsyncSessionLocal, max_attempts=settings.max_attempts))
    except Exception as e:
        click.echo(f"❌ Failed to read outbox: {e}", err=True)
        sys.exit(1)

    click.echo(f"Pending:   {result['pending']}")
    click.echo(f"Parked:    {result['parked']} (max attempts: {settings.max_attempts or 'unlimited'})")
    click.echo(f"Processed: {result['processed']}")
    for row in result["parked_sample"]:
        click.echo(f"  #{row['id']} {row['type']} attempts={row['attempts']} error={row['last_error']}")


@outbox.command()
@click.option("--id", "message_ids", type=int, multiple=True, help="Requeue only these rows.")
def requeue(message_ids: tuple[int, ...]) -> None:
    """Reset attempt counters so failed rows are retried."""
    from item_service.infra.database import AsyncSessionLocal

    count = asyncio.run(requeue_messages(AsyncSessionLocal, list(message_ids) or None))
    click.echo(f"✓ Requeued {count} message(s)")


@outbox.command()
@click.option(
    "--older-than-days",
    type=click.IntRange(min=0),
    default=None,
    help="Retention window; defaults to OUTBOX_RETENTION_DAYS.",
)
def purge(older_than_days: int | None) -> None:
    """Delete processed rows older than the retention window."""
    from item_service.infra.database import AsyncSessionLocal

    days = older_than_days if older_than_days is not None else get_outbox_settings().retention_days
    count = asyncio.run(purge_messages(AsyncSessionLocal, older_than_days=days))
    click.echo(f"✓ Purged {count} processed message(s) older than {days} day(s)")
