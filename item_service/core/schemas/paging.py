"""Paging parameters and paged results."""

from __future__ import annotations

import math

from pydantic import BaseModel, Field, computed_field

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class PagingParameters(BaseModel):
    """Normalized page request.

    Out-of-range input is coerced rather than rejected: a page number below 1
    becomes 1, a page size below 1 becomes the default and a page size above
    the maximum is capped.
    """

    page_number: int = DEFAULT_PAGE_NUMBER
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def normalize(cls, page_number: int | None, page_size: int | None) -> PagingParameters:
        number = page_number if page_number is not None and page_number >= 1 else DEFAULT_PAGE_NUMBER
        size = page_size if page_size is not None and page_size >= 1 else DEFAULT_PAGE_SIZE
        return cls(page_number=number, page_size=min(size, MAX_PAGE_SIZE))

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


class PagedResult[T](BaseModel):
    """One page of results with navigation metadata.

    Example:
        PagedResult[ItemResponse].create(items, total_count=42, page_number=2, page_size=10)
    """

    items: list[T] = Field(default_factory=list, description="Items on this page")
    total_count: int = Field(ge=0, description="Total number of items")
    page_number: int = Field(ge=1, description="Current page number")
    page_size: int = Field(ge=1, le=MAX_PAGE_SIZE, description="Items per page")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.total_count else 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages
