"""Database base classes and transaction helpers."""

from __future__ import annotations

from .base import NAMING_CONVENTION, Base, IntegerPKMixin, TimestampMixin, utcnow

__all__ = ["NAMING_CONVENTION", "Base", "IntegerPKMixin", "TimestampMixin", "utcnow"]
