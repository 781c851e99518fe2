"""Cache keys for item responses."""

from __future__ import annotations

ITEMS_PAGE_PATTERN = "items:page:*"


def items_page_key(page_number: int, page_size: int) -> str:
    """Key of one cached list page, e.g. ``items:page:1:size:10``."""
    return f"items:page:{page_number}:size:{page_size}"
