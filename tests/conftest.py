"""Pytest configuration and shared fixtures.

Organization:
    - Environment: settings that keep tests off external infrastructure
    - Database Fixtures: in-memory SQLite engine, session factory and session
    - Fakes: in-memory cache backend and recording publisher
    - Application Fixtures: FastAPI app with overridden dependencies and client
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator
import fnmatch
import os
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

# Ensure tests run without external infrastructure
os.environ.setdefault("DB_ENABLED", "false")
os.environ.setdefault("DB_SQLITE_PATH", ":memory:")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("REDIS_MAX_RETRIES", "1")
os.environ.setdefault("RABBIT_ENABLED", "false")
os.environ.setdefault("OUTBOX_ENABLED", "false")
os.environ.setdefault("LOG_JSON", "false")


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with every table created.

    StaticPool keeps a single connection so separate sessions see the same
    database.
    """
    import item_service.core.models  # noqa: F401
    import item_service.infra.events.outbox.models  # noqa: F401
    from item_service.core.database.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# Fakes
# ============================================================================


class InMemoryCache:
    """Stand-in for RedisCache keeping JSON values in a dict.

    Records every call so tests can assert on cache traffic.
    """

    def __init__(self) -> None:
        self.store: dict[str, Any] = {}
        self.ttls: dict[str, int | None] = {}
        self.calls: list[tuple[str, str]] = []

    async def get(self, key: str) -> Any | None:
        self.calls.append(("get", key))
        return self.store.get(key)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        self.calls.append(("set", key))
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete_pattern(self, pattern: str) -> int:
        self.calls.append(("delete_pattern", pattern))
        matched = [key for key in self.store if fnmatch.fnmatchcase(key, pattern)]
        for key in matched:
            del self.store[key]
            self.ttls.pop(key, None)
        return len(matched)

    async def health_check(self) -> bool:
        return True


class RecordingPublisher:
    """MessagePublisher that records published messages.

    ``fail_contents`` and ``fail_all`` make matching publishes raise
    PublishError. ``connect_failures`` makes that many ``ensure_connected``
    calls fail before the broker counts as reachable.
    """

    def __init__(self) -> None:
        self.published: list[tuple[str, str]] = []
        self.attempts: list[tuple[str, str]] = []
        self.fail_contents: set[str] = set()
        self.fail_all = False
        self.connect_failures = 0
        self.connect_calls = 0

    async def ensure_connected(self) -> None:
        from item_service.core.exceptions import PublishError

        self.connect_calls += 1
        if self.connect_failures > 0:
            self.connect_failures -= 1
            msg = "RabbitMQ unreachable: connection refused"
            raise PublishError(msg)

    async def publish(self, type_tag: str, content: str) -> None:
        from item_service.core.exceptions import PublishError

        self.attempts.append((type_tag, content))
        if self.fail_all or content in self.fail_contents:
            msg = "broker unavailable"
            raise PublishError(msg, event_type=type_tag)
        self.published.append((type_tag, content))


@pytest.fixture
def memory_cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app(
    session_factory: async_sessionmaker[AsyncSession],
    memory_cache: InMemoryCache,
) -> FastAPI:
    """Application wired to the in-memory database and cache.

    The lifespan is not run; dependencies are overridden instead.
    """
    from item_service.app.main import create_app
    from item_service.core.dependencies import get_db_session, get_response_cache
    from item_service.infra.cache.response_cache import ResponseCache

    application = create_app()

    async def _session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db_session] = _session
    application.dependency_overrides[get_response_cache] = lambda: ResponseCache(memory_cache)  # type: ignore[arg-type]
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
