"""CLI output utilities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import msgspec
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from collectionkit.core.trackby import get_item_fields, get_item_value
from collectionkit.core.values import to_text
from collectionkit.operations.pipeline import ProcessResult


def collect_columns(items: Sequence[Any]) -> list[str]:
    """Union of item fields, in first-seen order."""
    columns: dict[str, None] = {}
    for item in items:
        for name in get_item_fields(item):
            columns[name] = None
    return list(columns)


def format_pagination_controls(
    current_page: int,
    total_pages: int,
    total_items: int,
) -> str:
    """Format pagination controls for display.

    Args:
        current_page: Current page (1-based)
        total_pages: Total number of pages
        total_items: Total number of items

    Returns:
        Formatted pagination controls
    """
    controls = [f"Page {current_page} of {total_pages}", f"({total_items} items)"]

    nav_parts = []
    if current_page > 1:
        nav_parts.append("[cyan]Previous[/cyan]")
    if current_page < total_pages:
        nav_parts.append("[cyan]Next[/cyan]")

    if nav_parts:
        controls.append(" | ".join(nav_parts))

    return " • ".join(controls)


def build_table(
    result: ProcessResult, columns: Sequence[str] | None = None, title: str | None = None
) -> Table:
    """Render the page items as a table, indenting nested items."""
    columns = list(columns) if columns else collect_columns(result.items)
    table = Table(title=title) if title else Table()
    tree = result.items_tree
    selection = result.selection_tree

    if selection is not None:
        table.add_column("", width=3)
    for column in columns:
        table.add_column(column)

    for item in result.items:
        cells = [
            escape(to_text(get_item_value(item, column))) for column in columns
        ]
        if tree.is_tree and cells:
            marker = "▸ " if tree.has_children(item) else "  "
            cells[0] = "  " * (tree.get_level(item) - 1) + marker + cells[0]
        if selection is not None:
            if selection.is_item_indeterminate(item):
                mark = "[-]"
            elif selection.is_item_selected(item):
                mark = "[x]"
            else:
                mark = "[ ]"
            cells.insert(0, escape(mark))
        table.add_row(*cells)
    return table


def print_result(
    console: Console, result: ProcessResult, columns: Sequence[str] | None = None
) -> None:
    """Print a processed page with its counters."""
    console.print(build_table(result, columns))

    total = (
        result.filtered_items_count
        if result.filtered_items_count is not None
        else len(result.all_page_items)
    )
    if result.pages_count is not None and result.actual_page_index is not None:
        console.print(
            format_pagination_controls(
                result.actual_page_index, result.pages_count, total
            )
        )
    else:
        console.print(f"{total} items")

    if result.selection_tree is not None:
        count = result.selection_tree.get_selected_items_count()
        console.print(f"{count} selected")


def result_to_json(result: ProcessResult) -> str:
    """Encode a processed page and its counters as JSON."""
    payload = {
        "items": result.items,
        "pagesCount": result.pages_count,
        "currentPageIndex": result.actual_page_index,
        "filteredItemsCount": result.filtered_items_count,
        "totalItemsCount": len(result.all_page_items),
    }
    if result.selection_tree is not None:
        payload["selectedItemsCount"] = result.selection_tree.get_selected_items_count()
    return msgspec.json.format(msgspec.json.encode(payload), indent=2).decode()
