"""Unit tests for the outbox processor."""
from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
import json
import time
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import event, select
from sqlalchemy.exc import OperationalError

from item_service.core.exceptions import PublishError
from item_service.infra.events.outbox.models import OutboxMessage
from item_service.infra.events.outbox.processor import OutboxProcessor, ProcessorState
from item_service.infra.events.outbox.repository import OutboxRepository

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


async def _enqueue(session_factory, count: int, type_tag: str = "ItemCreatedV1") -> list[int]:
    """Insert ``count`` pending rows, one second apart, with content ``{"n": i}``."""
    async with session_factory() as session:
        messages = [
            OutboxMessage(
                type=type_tag,
                content=json.dumps({"n": i}),
                created_at=BASE_TIME + timedelta(seconds=i),
                attempts=0,
            )
            for i in range(count)
        ]
        session.add_all(messages)
        await session.commit()
        return [m.id for m in messages]


async def _rows(session_factory) -> list[OutboxMessage]:
    async with session_factory() as session:
        return list((await session.execute(select(OutboxMessage).order_by(OutboxMessage.id))).scalars())


@pytest.fixture
def processor(session_factory, publisher) -> OutboxProcessor:
    return OutboxProcessor(session_factory, publisher, poll_interval=0.01, max_attempts=3)


# ──────────────────────────────────────────────────────────────
# Single cycle
# ──────────────────────────────────────────────────────────────


class TestRunCycle:
    """One poll, publish and persist pass."""

    async def test_publishes_in_insertion_order(self, session_factory, publisher, processor):
        """Rows are published oldest first and marked processed."""
        await _enqueue(session_factory, 3)

        result = await processor.run_cycle()

        assert [json.loads(content)["n"] for _, content in publisher.published] == [0, 1, 2]
        assert result.fetched == 3
        assert result.published == 3
        assert all(row.processed_at is not None for row in await _rows(session_factory))

    async def test_publishes_by_created_at_not_insertion_order(self, session_factory, publisher, processor):
        """Rows inserted newest first are still published oldest first."""
        async with session_factory() as session:
            session.add_all(
                OutboxMessage(
                    type="ItemCreatedV1",
                    content=json.dumps({"n": i}),
                    created_at=BASE_TIME - timedelta(seconds=i),
                    attempts=0,
                )
                for i in range(3)
            )
            await session.commit()

        await processor.run_cycle()

        assert [json.loads(content)["n"] for _, content in publisher.published] == [2, 1, 0]

    async def test_unreachable_broker_fails_cycle_without_counting_attempts(
        self, session_factory, publisher, processor
    ):
        """A broker that is down at first is picked up by a later cycle."""
        await _enqueue(session_factory, 2)
        publisher.connect_failures = 1

        with pytest.raises(PublishError):
            await processor.run_cycle()

        assert publisher.attempts == []
        assert all(row.attempts == 0 and row.processed_at is None for row in await _rows(session_factory))

        result = await processor.run_cycle()

        assert result.published == 2
        assert all(row.processed_at is not None for row in await _rows(session_factory))

    async def test_empty_outbox_does_not_connect(self, processor, publisher):
        await processor.run_cycle()

        assert publisher.connect_calls == 0

    async def test_empty_outbox(self, processor, publisher):
        result = await processor.run_cycle()

        assert result.fetched == 0
        assert publisher.attempts == []
        assert processor.state == ProcessorState.IDLE

    async def test_failure_is_isolated_to_its_row(self, session_factory, publisher, processor):
        """A failing row stays pending while its neighbours are processed."""
        await _enqueue(session_factory, 3)
        publisher.fail_contents = {json.dumps({"n": 1})}

        result = await processor.run_cycle()

        first, second, third = await _rows(session_factory)
        assert result.published == 2
        assert result.failed == 1
        assert first.processed_at is not None
        assert third.processed_at is not None
        assert second.processed_at is None
        assert second.attempts == 1
        assert "broker unavailable" in second.last_error

    async def test_failed_row_is_retried_next_cycle(self, session_factory, publisher, processor):
        await _enqueue(session_factory, 2)
        publisher.fail_contents = {json.dumps({"n": 1})}
        await processor.run_cycle()

        publisher.fail_contents = set()
        result = await processor.run_cycle()

        assert result.fetched == 1
        assert result.published == 1
        assert all(row.processed_at is not None for row in await _rows(session_factory))

    async def test_batch_size_limits_each_cycle(self, session_factory, publisher):
        await _enqueue(session_factory, 60)
        processor = OutboxProcessor(session_factory, publisher)

        first = await processor.run_cycle()
        second = await processor.run_cycle()

        assert processor.batch_size == 50
        assert first.published == 50
        assert second.published == 10

    async def test_row_is_parked_after_max_attempts(self, session_factory, publisher, processor):
        """A row that keeps failing is skipped once it reaches max_attempts."""
        await _enqueue(session_factory, 1)
        publisher.fail_all = True

        results = [await processor.run_cycle() for _ in range(4)]

        assert [r.fetched for r in results] == [1, 1, 1, 0]
        assert results[2].parked == 1
        (row,) = await _rows(session_factory)
        assert row.processed_at is None
        assert row.attempts == 3

    async def test_unlimited_attempts_never_parks(self, session_factory, publisher):
        await _enqueue(session_factory, 1)
        publisher.fail_all = True
        processor = OutboxProcessor(session_factory, publisher, max_attempts=0)

        results = [await processor.run_cycle() for _ in range(4)]

        assert all(r.fetched == 1 and r.parked == 0 for r in results)

    async def test_batch_is_persisted_with_one_commit(self, db_engine, session_factory, publisher, processor):
        """Flags for the whole batch are written by a single commit."""
        await _enqueue(session_factory, 5)
        commits: list[object] = []

        def on_commit(conn) -> None:
            commits.append(conn)

        event.listen(db_engine.sync_engine, "commit", on_commit)
        try:
            await processor.run_cycle()
        finally:
            event.remove(db_engine.sync_engine, "commit", on_commit)

        assert len(commits) == 1

    async def test_store_error_propagates_from_cycle(self, session_factory, publisher):
        repository = OutboxRepository()
        repository.fetch_pending = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))
        processor = OutboxProcessor(session_factory, publisher, repository=repository)

        with pytest.raises(OperationalError):
            await processor.run_cycle()

        assert publisher.attempts == []


# ──────────────────────────────────────────────────────────────
# Loop lifecycle
# ──────────────────────────────────────────────────────────────


class TestLifecycle:
    """Starting, sleeping and stopping the loop."""

    async def test_start_drains_in_background(self, session_factory, publisher, processor):
        await _enqueue(session_factory, 2)

        await processor.start()
        for _ in range(100):
            if len(publisher.published) == 2:
                break
            await asyncio.sleep(0.01)
        await processor.stop()

        assert len(publisher.published) == 2
        assert processor.state == ProcessorState.STOPPED
        assert not processor.is_running

    async def test_stop_wakes_sleeping_loop(self, session_factory, publisher):
        """stop() returns promptly even with a long poll interval."""
        processor = OutboxProcessor(session_factory, publisher, poll_interval=60.0)
        await processor.start()
        for _ in range(100):
            if processor.state == ProcessorState.SLEEPING:
                break
            await asyncio.sleep(0.01)

        started = time.monotonic()
        await processor.stop()

        assert time.monotonic() - started < 1.0
        assert processor.state == ProcessorState.STOPPED

    async def test_stop_mid_batch_persists_finished_rows(self, session_factory, publisher, processor):
        """The in-flight publish completes, the rest of the batch waits."""
        await _enqueue(session_factory, 3)
        original = publisher.publish

        async def publish_then_stop(type_tag: str, content: str) -> None:
            await original(type_tag, content)
            processor.request_stop()

        publisher.publish = publish_then_stop

        await processor.run()

        first, second, third = await _rows(session_factory)
        assert first.processed_at is not None
        assert second.processed_at is None
        assert third.processed_at is None
        assert processor.state == ProcessorState.STOPPED

    async def test_store_error_does_not_stop_loop(self, session_factory, publisher):
        """A failed cycle is logged and the next one still runs."""
        repository = OutboxRepository()
        calls = 0
        processor: OutboxProcessor

        async def flaky_fetch(session, **kwargs):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise OperationalError("SELECT", {}, Exception("down"))
            processor.request_stop()
            return []

        repository.fetch_pending = flaky_fetch
        processor = OutboxProcessor(session_factory, publisher, poll_interval=0.01, repository=repository)

        await processor.run()

        assert calls == 2

    async def test_broker_down_at_start_is_retried_by_loop(self, session_factory, publisher, processor):
        """The loop keeps running through broker outages and publishes once it is back."""
        await _enqueue(session_factory, 1)
        publisher.connect_failures = 2
        original = publisher.publish

        async def publish_then_stop(type_tag: str, content: str) -> None:
            await original(type_tag, content)
            processor.request_stop()

        publisher.publish = publish_then_stop

        await asyncio.wait_for(processor.run(), timeout=5.0)

        assert publisher.connect_calls == 3
        (row,) = await _rows(session_factory)
        assert row.processed_at is not None
        assert row.attempts == 0

    async def test_stop_before_start_is_safe(self, processor):
        await processor.stop()

        assert processor.state == ProcessorState.STOPPED

    async def test_stop_cancels_after_timeout(self, session_factory):
        """A publish that hangs past shutdown_timeout is cancelled."""
        await _enqueue(session_factory, 1)
        hung = asyncio.Event()

        class HangingPublisher:
            async def ensure_connected(self) -> None:
                pass

            async def publish(self, type_tag: str, content: str) -> None:
                hung.set()
                await asyncio.sleep(60)

        processor = OutboxProcessor(session_factory, HangingPublisher(), shutdown_timeout=0.05)
        await processor.start()
        await asyncio.wait_for(hung.wait(), timeout=1.0)

        await processor.stop()

        assert not processor.is_running
        assert processor.state == ProcessorState.STOPPED
