"""Free-text filtering."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from collectionkit.core.trackby import get_item_fields, get_item_value
from collectionkit.core.values import to_text

FilteringFunction = Callable[[Any, str, Sequence[str] | None], bool]


def default_filtering_function(
    item: Any, filtering_text: str, filtering_fields: Sequence[str] | None = None
) -> bool:
    """Case-insensitive containment over the given fields or all fields."""
    if not filtering_text:
        return True
    fields = filtering_fields if filtering_fields is not None else get_item_fields(item)
    needle = filtering_text.lower()
    return any(needle in to_text(get_item_value(item, key)).lower() for key in fields)


@dataclass(frozen=True)
class FilteringOptions:
    """Free-text filtering configuration.

    Attributes:
        filtering_function: Replaces the default matcher
        fields: Fields searched by the default matcher (all when None)
        default_filtering_text: Text used when the state carries none
    """

    filtering_function: FilteringFunction | None = None
    fields: tuple[str, ...] | None = None
    default_filtering_text: str = ""


def create_filter(
    filtering_text: str | None, options: FilteringOptions
) -> Callable[[Any], bool]:
    """Create a predicate applying the free-text filter."""
    function = options.filtering_function or default_filtering_function
    text = filtering_text if filtering_text is not None else options.default_filtering_text
    fields = list(options.fields) if options.fields is not None else None
    return lambda item: bool(function(item, text, fields))


def filter_items(
    items: Iterable[Any], filtering_text: str | None, options: FilteringOptions
) -> list[Any]:
    """Return the items matching the filtering text."""
    predicate = create_filter(filtering_text, options)
    return [item for item in items if predicate(item)]
