"""Pagination.

Page indexes are 1-based. Requested indexes that are missing, not
numbers, below 1 or beyond the last page fall back to the first page.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, NamedTuple, TypeVar

from collectionkit.core.exceptions import ConfigurationError

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


class Page(NamedTuple):
    items: list[Any]
    pages_count: int
    page_index: int


def get_pages_count(items_count: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    if page_size < 1:
        raise ConfigurationError(f"Page size must be at least 1, got {page_size}")
    return math.ceil(items_count / page_size)


def normalize_page_index(page_index: Any, pages_count: int) -> int:
    """Return a valid 1-based page index."""
    if isinstance(page_index, bool) or not isinstance(page_index, (int, float)):
        return 1
    if math.isnan(page_index) or page_index < 1 or page_index > pages_count:
        return 1
    return int(page_index)


def paginate(
    items: Sequence[T], page_index: Any = 1, page_size: int | None = None
) -> Page:
    """Slice one page out of the items.

    Args:
        items: Items to paginate
        page_index: Requested 1-based page index
        page_size: Items per page (DEFAULT_PAGE_SIZE when None)

    Returns:
        Page items with the page count and the normalized page index
    """
    size = DEFAULT_PAGE_SIZE if page_size is None else page_size
    pages_count = get_pages_count(len(items), size)
    actual = normalize_page_index(page_index, pages_count)
    start = (actual - 1) * size
    return Page(list(items[start : start + size]), pages_count, actual)
