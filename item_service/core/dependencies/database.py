"""Database dependencies for FastAPI route handlers.

Route handlers take a session with ``Depends(get_db_session)``; the session is
closed when the request completes. Code outside FastAPI (CLI commands, the
outbox processor) uses ``get_async_session()`` or the session factory directly.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from item_service.infra.database import get_async_session


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for a request-scoped database session.

    Example:
        @router.get("/items/{item_id}")
        async def get_item(item_id: int, session: AsyncSession = Depends(get_db_session)):
            return await session.get(Item, item_id)
    """
    async with get_async_session() as session:
        yield session
