"""Item database model."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from item_service.core.database.base import Base, IntegerPKMixin, TimestampMixin

NAME_MAX_LENGTH = 100


class Item(Base, IntegerPKMixin, TimestampMixin):
    """A stocked item with a name and a non-negative quantity."""

    __tablename__ = "items"

    name: Mapped[str] = mapped_column(
        String(NAME_MAX_LENGTH),
        nullable=False,
        comment="Display name",
    )
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Units in stock",
    )

    __table_args__ = (CheckConstraint("quantity >= 0", name="quantity_non_negative"),)

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name={self.name!r}, quantity={self.quantity})>"
