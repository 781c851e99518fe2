"""Base service class for business logic."""

from __future__ import annotations

import logging


class BaseService:
    """Base class for service classes.

    Gives every service a logger named after its class.

    Example:
        class ItemService(BaseService):
            async def get_item(self, item_id: int) -> Item:
                self.logger.info("Fetching item", extra={"item_id": item_id})
                ...
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
