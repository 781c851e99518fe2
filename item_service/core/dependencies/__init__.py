"""FastAPI dependencies."""

from __future__ import annotations

from .cache import get_response_cache
from .database import get_db_session

__all__ = ["get_db_session", "get_response_cache"]
