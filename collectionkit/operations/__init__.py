"""Collection operations: free-text filter, sort, paginate and the pipeline."""

from .filter import FilteringOptions, default_filtering_function, filter_items
from .paginate import DEFAULT_PAGE_SIZE, Page, get_pages_count, normalize_page_index, paginate
from .pipeline import (
    CollectionOptions,
    CollectionState,
    PaginationOptions,
    ProcessResult,
    PropertyFilteringOptions,
    PropertyFilterOption,
    SelectionOptions,
    SortingOptions,
    TreeOptions,
    collect_filtering_options,
    create_property_filter,
    items_are_equal,
    process_items,
    process_selected_items,
    prune_expanded_items,
)
from .sort import SortingColumn, SortingState, create_comparator, sort_items

__all__ = [
    "FilteringOptions",
    "default_filtering_function",
    "filter_items",
    "DEFAULT_PAGE_SIZE",
    "Page",
    "get_pages_count",
    "normalize_page_index",
    "paginate",
    "SortingColumn",
    "SortingState",
    "create_comparator",
    "sort_items",
    "CollectionOptions",
    "CollectionState",
    "PaginationOptions",
    "ProcessResult",
    "PropertyFilteringOptions",
    "PropertyFilterOption",
    "SelectionOptions",
    "SortingOptions",
    "TreeOptions",
    "collect_filtering_options",
    "create_property_filter",
    "items_are_equal",
    "process_items",
    "process_selected_items",
    "prune_expanded_items",
]
