"""Sorting by field or comparator.

Missing values sort as the empty string, which orders before any text and
compares as "nothing" against numbers. Strings use locale-aware,
case-insensitive ordering; other values compare loosely.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from collectionkit.core.trackby import get_item_value
from collectionkit.core.values import locale_compare, loose_compare

Comparator = Callable[[Any, Any], int]


@dataclass(frozen=True)
class SortingColumn:
    """Column to sort by; a comparator takes precedence over a field."""

    sorting_field: str | None = None
    sorting_comparator: Comparator | None = None


@dataclass(frozen=True)
class SortingState:
    sorting_column: SortingColumn
    is_descending: bool = False


def field_comparator(sorting_field: str) -> Comparator:
    """Create a comparator reading one field of each item."""

    def compare(row1: Any, row2: Any) -> int:
        value1 = get_item_value(row1, sorting_field)
        value2 = get_item_value(row2, sorting_field)
        value1 = "" if value1 is None else value1
        value2 = "" if value2 is None else value2
        if isinstance(value1, str) and isinstance(value2, str):
            return locale_compare(value1, value2)
        return loose_compare(value1, value2)

    return compare


def create_comparator(state: SortingState | None) -> Comparator | None:
    """Create the comparator for a sorting state, or None to keep order."""
    if state is None:
        return None
    column = state.sorting_column
    if column.sorting_comparator is not None:
        comparator = column.sorting_comparator
    elif column.sorting_field:
        comparator = field_comparator(column.sorting_field)
    else:
        return None

    direction = -1 if state.is_descending else 1
    return lambda a, b: comparator(a, b) * direction


def sort_items(items: Iterable[Any], state: SortingState | None) -> list[Any]:
    """Return a sorted copy of the items; the sort is stable."""
    comparator = create_comparator(state)
    items = list(items)
    if comparator is None:
        return items
    return sorted(items, key=functools.cmp_to_key(comparator))
