"""Items API router."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from item_service.core.dependencies import get_db_session, get_response_cache
from item_service.core.schemas.error import ProblemDetail, ValidationProblemDetail
from item_service.core.schemas.paging import PagedResult, PagingParameters
from item_service.core.settings import get_cache_settings
from item_service.features.items.schemas import ItemCreate, ItemResponse, ItemUpdate
from item_service.features.items.service import ItemService
from item_service.infra.cache.response_cache import ResponseCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/items", tags=["items"])

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ProblemDetail, "description": "Item not found"}}
_INVALID = {
    status.HTTP_422_UNPROCESSABLE_ENTITY: {
        "model": ValidationProblemDetail,
        "description": "Validation failed",
    }
}


def get_item_service(
    session: AsyncSession = Depends(get_db_session),
    cache: ResponseCache = Depends(get_response_cache),
) -> ItemService:
    """Get item service dependency."""
    return ItemService(session, cache, cache_ttl=get_cache_settings().items_ttl)


@router.get(
    "",
    response_model=PagedResult[ItemResponse],
    summary="List items",
)
async def list_items(
    page_number: int | None = Query(default=None, description="1-based page; defaults to 1"),
    page_size: int | None = Query(default=None, description="Items per page; defaults to 10, max 100"),
    service: ItemService = Depends(get_item_service),
) -> PagedResult[ItemResponse]:
    """List items one page at a time.

    Pages are cached for a few minutes and dropped whenever an item changes.
    """
    return await service.list_items(PagingParameters.normalize(page_number, page_size))


@router.get(
    "/{item_id}",
    response_model=ItemResponse,
    responses=_NOT_FOUND,
    summary="Get item",
)
async def get_item(
    item_id: int,
    service: ItemService = Depends(get_item_service),
) -> ItemResponse:
    item = await service.get_item(item_id)
    return ItemResponse.model_validate(item)


@router.post(
    "",
    response_model=ItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_INVALID,
    summary="Create item",
)
async def create_item(
    data: ItemCreate,
    request: Request,
    response: Response,
    service: ItemService = Depends(get_item_service),
) -> ItemResponse:
    """Create an item and emit ``ItemCreatedV1``.

    The ``Location`` header points at the new item.
    """
    item = await service.create_item(data)
    response.headers["Location"] = str(request.url_for("get_item", item_id=item.id).path)
    return ItemResponse.model_validate(item)


@router.put(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**_NOT_FOUND, **_INVALID},
    summary="Update item",
)
async def update_item(
    item_id: int,
    data: ItemUpdate,
    service: ItemService = Depends(get_item_service),
) -> Response:
    """Replace an item's name and quantity and emit ``ItemUpdatedV1``."""
    await service.update_item(item_id, data)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND,
    summary="Delete item",
)
async def delete_item(
    item_id: int,
    service: ItemService = Depends(get_item_service),
) -> Response:
    """Delete an item and emit ``ItemDeletedV1``."""
    await service.delete_item(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
