"""Domain models."""

from __future__ import annotations

from .item import Item

__all__ = ["Item"]
