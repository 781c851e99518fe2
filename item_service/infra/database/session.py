"""Database engine and session management.

The engine and session factory are created once at import from
``DatabaseSettings``. PostgreSQL runs through psycopg3; when the database is
disabled the service falls back to SQLite through aiosqlite.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from item_service.core.database.base import Base
from item_service.core.settings import get_db_settings
from item_service.utils.retry import retry

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

db_settings = get_db_settings()

engine = create_async_engine(db_settings.url, **db_settings.engine_kwargs())

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_async_session() -> AsyncIterator[AsyncSession]:
    """Yield a session that is rolled back on error and always closed.

    Example:
        async with get_async_session() as session:
            result = await session.execute(select(Item))
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@retry(
    max_attempts=db_settings.startup_max_retries,
    initial_delay=db_settings.startup_retry_delay,
    exceptions=(OperationalError, OSError),
)
async def init_database() -> None:
    """Verify connectivity and create missing tables.

    Retries on connection errors so the service tolerates a database that
    starts after it. Table creation is idempotent.
    """
    # Register models on the metadata before create_all
    import item_service.core.models  # noqa: F401
    import item_service.infra.events.outbox.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        await conn.run_sync(Base.metadata.create_all)

    logger.info(
        "Database initialized",
        extra={"dialect": engine.dialect.name, "database": engine.url.database},
    )


async def close_database() -> None:
    """Dispose of the connection pool."""
    await engine.dispose()
    logger.info("Database connections closed")


async def check_database() -> bool:
    """Return True when a trivial query succeeds."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database health check failed")
        return False
    return True
