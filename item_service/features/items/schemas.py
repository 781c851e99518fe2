"""Request and response schemas for items."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from item_service.core.models.item import NAME_MAX_LENGTH


class ItemBase(BaseModel):
    name: str = Field(
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Item name",
        examples=["Widget"],
    )
    quantity: int = Field(ge=0, description="Units in stock", examples=[3])

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            msg = "Name must not be blank"
            raise ValueError(msg)
        return value


class ItemCreate(ItemBase):
    """Payload for creating an item."""


class ItemUpdate(ItemBase):
    """Payload for replacing an item's name and quantity."""


class ItemResponse(BaseModel):
    """Item as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    quantity: int
    created_at: datetime
    updated_at: datetime | None = None
