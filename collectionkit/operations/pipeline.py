"""Collection processing pipeline.

Every call recomputes the visible page from the full item list:

    tree visibility -> property filter -> free-text filter -> sort -> paginate

Counters are threaded through the stages: `filtered_items_count` is the
number of items left after the configured filtering stages, before
sorting and pagination, and `all_page_items` is the filtered and sorted
list before it is cut into pages.

In tree mode the property and free-text filters are combined and applied
to the whole hierarchy: an item stays when it matches or when one of its
descendants does, and only then is visibility applied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import msgspec

from collectionkit.core.diagnostics import Diagnostics
from collectionkit.core.trackby import TrackBy, get_item_value, get_trackable_value
from collectionkit.core.values import fixup_falsy_values, to_text
from collectionkit.operations.filter import FilteringOptions, create_filter
from collectionkit.operations.paginate import DEFAULT_PAGE_SIZE, paginate
from collectionkit.operations.sort import SortingState, create_comparator
from collectionkit.query.evaluator import QueryEvaluator
from collectionkit.query.models import EMPTY_QUERY, FilteringProperty, TokenGroup
from collectionkit.tree.index import GetId, GetParentId, TreeIndex, build_index
from collectionkit.tree.selection import SelectionState, SelectionTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyFilteringOptions:
    """Property filtering configuration.

    Attributes:
        filtering_properties: Properties and the operators they support
        filtering_function: Replaces query evaluation, called as
            function(item, query)
        default_query: Query used when the state carries none
    """

    filtering_properties: tuple[FilteringProperty, ...] = ()
    filtering_function: Callable[[Any, TokenGroup], bool] | None = None
    default_query: TokenGroup | None = None


@dataclass(frozen=True)
class SortingOptions:
    default_state: SortingState | None = None


@dataclass(frozen=True)
class PaginationOptions:
    page_size: int = DEFAULT_PAGE_SIZE
    default_page: int = 1


@dataclass(frozen=True)
class SelectionOptions:
    """Selection configuration.

    Attributes:
        track_by: Identity projection for selected items
        keep_selection: Keep selected items that are not on the current page
        default_selected_items: Selection used when the state carries none
        group_selection: Build a tri-state SelectionTree over the items
        is_complete: Whether an item's children (None: the roots) are
            fully loaded
    """

    track_by: TrackBy = None
    keep_selection: bool = False
    default_selected_items: tuple[Any, ...] = ()
    group_selection: bool = False
    is_complete: Callable[[Any], bool] | None = None


@dataclass(frozen=True)
class TreeOptions:
    """Hierarchy of the items.

    Attributes:
        get_id: Item id
        get_parent_id: Parent id, None for roots
        default_expanded: Ids expanded when the state carries none
    """

    get_id: GetId
    get_parent_id: GetParentId
    default_expanded: tuple[Hashable, ...] = ()


@dataclass(frozen=True)
class CollectionOptions:
    """Which stages run, and how. A stage left as None is skipped."""

    filtering: FilteringOptions | None = None
    property_filtering: PropertyFilteringOptions | None = None
    sorting: SortingOptions | None = None
    pagination: PaginationOptions | None = None
    selection: SelectionOptions | None = None
    tree: TreeOptions | None = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    now: Callable[[], datetime] | None = None


@dataclass(frozen=True)
class CollectionState:
    """Caller-owned state from the previous render."""

    filtering_text: str | None = None
    property_filtering_query: TokenGroup | None = None
    sorting_state: SortingState | None = None
    current_page_index: Any = None
    selected_items: Sequence[Any] | None = None
    expanded_items: Iterable[Hashable] | None = None
    selection_state: SelectionState | None = None


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one pipeline run."""

    items: list[Any]
    all_page_items: list[Any]
    items_tree: TreeIndex
    pages_count: int | None = None
    actual_page_index: int | None = None
    filtered_items_count: int | None = None
    selected_items: list[Any] | None = None
    selection_tree: SelectionTree | None = None


class PropertyFilterOption(msgspec.Struct, frozen=True, rename="camel"):
    """A distinct value offered for a filtering property."""

    property_key: str
    value: str


def create_property_filter(
    query: TokenGroup | None,
    options: PropertyFilteringOptions,
    diagnostics: Diagnostics | None = None,
    now: Callable[[], datetime] | None = None,
) -> Callable[[Any], bool]:
    """Create the predicate applying a property filter query."""
    query = query if query is not None else options.default_query or EMPTY_QUERY
    if options.filtering_function is not None:
        function = options.filtering_function
        return lambda item: bool(function(item, query))
    evaluator = QueryEvaluator(options.filtering_properties, diagnostics, now)
    return evaluator.create_predicate(query)


def process_items(
    items: Sequence[Any],
    state: CollectionState | None = None,
    options: CollectionOptions | None = None,
) -> ProcessResult:
    """Derive the visible page and counters from the full item list.

    Args:
        items: All items (never modified)
        state: Filtering text, query, sorting, page, selection and expansion
        options: Enabled stages and their configuration

    Returns:
        Page items, all filtered and sorted items, counters and projections

    Raises:
        ConfigurationError: If the options or the query cannot be evaluated
    """
    state = state or CollectionState()
    options = options or CollectionOptions()

    tree = options.tree
    expanded = state.expanded_items
    if expanded is None:
        expanded = tree.default_expanded if tree else ()
    index = build_index(
        items,
        tree.get_id if tree else None,
        tree.get_parent_id if tree else None,
        expanded,
    )

    predicates: list[Callable[[Any], bool]] = []
    if options.property_filtering is not None:
        predicates.append(
            create_property_filter(
                state.property_filtering_query,
                options.property_filtering,
                options.diagnostics,
                options.now,
            )
        )
    if options.filtering is not None:
        predicates.append(create_filter(state.filtering_text, options.filtering))

    filtered_items_count = None
    if predicates:

        def predicate(item: Any) -> bool:
            return all(stage(item) for stage in predicates)

        if index.is_tree:
            # Ancestors of matching items stay so the hierarchy is preserved.
            result = index.filter(predicate)
        else:
            result = [item for item in items if predicate(item)]
        filtered_items_count = len(result)
        logger.debug("Filters kept %d of %d items", filtered_items_count, len(items))
    else:
        result = index.visible_items() if index.is_tree else list(items)
        logger.debug("Visible items: %d of %d", len(result), len(items))

    if options.sorting is not None:
        comparator = create_comparator(
            state.sorting_state or options.sorting.default_state
        )
        if comparator is not None:
            result = index.sorted(result, comparator)

    all_page_items = result
    page_items = result
    pages_count = None
    actual_page_index = None
    if options.pagination is not None:
        requested = state.current_page_index
        if requested is None:
            requested = options.pagination.default_page
        page = paginate(all_page_items, requested, options.pagination.page_size)
        page_items, pages_count, actual_page_index = page
        logger.debug("Page %d of %d", actual_page_index, pages_count)

    selected_items = None
    selection_tree = None
    selection = options.selection
    if selection is not None:
        selected = state.selected_items
        if selected is None:
            selected = selection.default_selected_items
        if selection.keep_selection:
            selected_items = list(selected)
        else:
            selected_items = process_selected_items(
                page_items, selected, selection.track_by
            )
        if selection.group_selection:
            selection_tree = SelectionTree.from_index(
                index,
                state.selection_state or SelectionState(),
                is_complete=selection.is_complete,
                track_by=selection.track_by,
            )

    return ProcessResult(
        items=page_items,
        all_page_items=all_page_items,
        items_tree=index,
        pages_count=pages_count,
        actual_page_index=actual_page_index,
        filtered_items_count=filtered_items_count,
        selected_items=selected_items,
        selection_tree=selection_tree,
    )


def process_selected_items(
    items: Iterable[Any], selected_items: Iterable[Any], track_by: TrackBy = None
) -> list[Any]:
    """Keep the items that are selected, in item order."""
    selected = {get_trackable_value(track_by, item) for item in selected_items}
    return [item for item in items if get_trackable_value(track_by, item) in selected]


def items_are_equal(
    items1: Sequence[Any], items2: Sequence[Any], track_by: TrackBy = None
) -> bool:
    """Check whether two selections hold the same items."""
    if len(items1) != len(items2):
        return False
    keys = {get_trackable_value(track_by, item) for item in items1}
    return all(get_trackable_value(track_by, item) in keys for item in items2)


def prune_expanded_items(
    items: Iterable[Any], expanded_items: Iterable[Hashable], get_id: GetId
) -> set[Hashable]:
    """Drop expanded ids whose items are no longer present."""
    expanded = set(expanded_items)
    return {get_id(item) for item in items if get_id(item) in expanded}


def collect_filtering_options(
    items: Iterable[Any], properties: Iterable[FilteringProperty]
) -> list[PropertyFilterOption]:
    """List the distinct non-empty values of each filtering property."""
    items = list(items)
    options: list[PropertyFilterOption] = []
    for prop in properties:
        seen: dict[str, None] = {}
        for item in items:
            seen[to_text(fixup_falsy_values(get_item_value(item, prop.key)))] = None
        options.extend(
            PropertyFilterOption(property_key=prop.key, value=value)
            for value in seen
            if value != ""
        )
    return options
