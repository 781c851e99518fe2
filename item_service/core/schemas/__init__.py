"""Shared response schemas."""

from __future__ import annotations

from .error import ProblemDetail, ValidationError, ValidationProblemDetail
from .paging import MAX_PAGE_SIZE, PagedResult, PagingParameters

__all__ = [
    "MAX_PAGE_SIZE",
    "PagedResult",
    "PagingParameters",
    "ProblemDetail",
    "ValidationError",
    "ValidationProblemDetail",
]
