"""Items service layer.

Every mutation runs in a unit of work that stores the entity change and its
domain event together, then invalidates cached list pages once committed.
Lookups for update and delete run before the unit of work begins, so a
missing item never opens a transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from item_service.core.database.base import utcnow
from item_service.core.database.unit_of_work import UnitOfWork
from item_service.core.events import ItemCreatedV1, ItemDeletedV1, ItemUpdatedV1
from item_service.core.exceptions import NotFoundException
from item_service.core.models.item import Item
from item_service.core.schemas.paging import PagedResult, PagingParameters
from item_service.core.services.base import BaseService
from item_service.features.items.cache import ITEMS_PAGE_PATTERN, items_page_key
from item_service.features.items.schemas import ItemCreate, ItemResponse, ItemUpdate

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from item_service.infra.cache.response_cache import ResponseCache


class ItemService(BaseService):
    """CRUD operations on items with outbox events and cached list pages."""

    def __init__(
        self,
        session: AsyncSession,
        cache: ResponseCache,
        *,
        cache_ttl: int = 300,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        super().__init__()
        self.session = session
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.uow = unit_of_work or UnitOfWork(session)

    # ──────────────────────────────────────────────────────────────
    # Queries
    # ──────────────────────────────────────────────────────────────

    async def list_items(self, paging: PagingParameters) -> PagedResult[ItemResponse]:
        """Return one page of items, served from cache when present.

        Args:
            paging: Normalized page request.

        Returns:
            The page, ordered by id.
        """
        key = items_page_key(paging.page_number, paging.page_size)
        return await self.cache.get_or_populate(
            key,
            lambda: self._load_page(paging),
            ttl=self.cache_ttl,
            model=PagedResult[ItemResponse],
        )

    async def _load_page(self, paging: PagingParameters) -> PagedResult[ItemResponse]:
        total = (await self.session.execute(select(func.count()).select_from(Item))).scalar_one()
        stmt = select(Item).order_by(Item.id).offset(paging.offset).limit(paging.page_size)
        items = (await self.session.execute(stmt)).scalars().all()
        return PagedResult[ItemResponse](
            items=[ItemResponse.model_validate(item) for item in items],
            total_count=total,
            page_number=paging.page_number,
            page_size=paging.page_size,
        )

    async def get_item(self, item_id: int) -> Item:
        """Fetch one item.

        Raises:
            NotFoundException: If no item has this id.
        """
        item = await self.session.get(Item, item_id)
        if item is None:
            raise NotFoundException(
                detail=f"Item {item_id} not found",
                type="item-not-found",
                extra={"item_id": item_id},
            )
        return item

    # ──────────────────────────────────────────────────────────────
    # Commands
    # ──────────────────────────────────────────────────────────────

    async def create_item(self, data: ItemCreate) -> Item:
        """Store a new item and stage ``ItemCreatedV1``.

        Raises:
            TransactionError: If the store cannot begin or commit.
            SerializationError: If the event cannot be encoded.
        """
        await self.uow.begin()
        try:
            item = Item(name=data.name, quantity=data.quantity)
            self.session.add(item)
            await self.session.flush()
            await self.uow.publish_domain_event(
                ItemCreatedV1(item_id=item.id, created_at=item.created_at)
            )
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        self.logger.info("Item created", extra={"item_id": item.id})
        await self.cache.invalidate(ITEMS_PAGE_PATTERN)
        return item

    async def update_item(self, item_id: int, data: ItemUpdate) -> Item:
        """Replace an item's name and quantity and stage ``ItemUpdatedV1``.

        Raises:
            NotFoundException: If no item has this id.
            TransactionError: If the store cannot begin or commit.
        """
        item = await self.get_item(item_id)

        await self.uow.begin()
        try:
            item.name = data.name
            item.quantity = data.quantity
            item.updated_at = utcnow()
            await self.session.flush()
            await self.uow.publish_domain_event(
                ItemUpdatedV1(item_id=item.id, updated_at=item.updated_at)
            )
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        self.logger.info("Item updated", extra={"item_id": item.id})
        await self.cache.invalidate(ITEMS_PAGE_PATTERN)
        return item

    async def delete_item(self, item_id: int) -> None:
        """Remove an item and stage ``ItemDeletedV1``.

        Raises:
            NotFoundException: If no item has this id.
            TransactionError: If the store cannot begin or commit.
        """
        item = await self.get_item(item_id)

        await self.uow.begin()
        try:
            await self.session.delete(item)
            await self.session.flush()
            await self.uow.publish_domain_event(ItemDeletedV1(item_id=item_id))
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        self.logger.info("Item deleted", extra={"item_id": item_id})
        await self.cache.invalidate(ITEMS_PAGE_PATTERN)
