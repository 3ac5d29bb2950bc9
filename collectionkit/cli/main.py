"""Main CLI entry point and application setup."""

import dataclasses
import logging
from collections.abc import Callable, Hashable
from pathlib import Path
from typing import Any

import click
import msgspec
import yaml
from click.exceptions import Exit
from rich.console import Console

from collectionkit import __version__
from collectionkit.cli.config import build_options, load_config
from collectionkit.cli.output import print_result, result_to_json
from collectionkit.core.exceptions import CollectionError
from collectionkit.core.trackby import TrackBy, get_item_value, get_trackable_value
from collectionkit.core.values import to_text
from collectionkit.operations.pipeline import (
    CollectionState,
    PaginationOptions,
    SelectionOptions,
    SortingOptions,
    process_items,
)
from collectionkit.operations.sort import SortingColumn, SortingState
from collectionkit.query.codec import query_from_dict
from collectionkit.tree.index import TreeIndex

logger = logging.getLogger(__name__)


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.ERROR
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


class CollectionKitGroup(click.Group):
    """Custom group that reports errors without tracebacks."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            click.echo("Interrupted", err=True)
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            if ctx.obj and ctx.obj.get("debug"):
                raise
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


def load_items(path: Path) -> list[Any]:
    """Load items from a JSON or YAML file."""
    text = path.read_bytes()
    if path.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        try:
            data = msgspec.json.decode(text)
        except msgspec.DecodeError as e:
            raise click.BadParameter(f"Invalid JSON: {e}", param_hint="ITEMS_FILE")
    if isinstance(data, dict) and "items" in data:
        data = data["items"]
    if not isinstance(data, list):
        raise click.BadParameter("Expected a list of items", param_hint="ITEMS_FILE")
    return data


def find_item(index: TreeIndex, item_id: str, track_by: TrackBy = None) -> Any | None:
    """Find an item by the text form of its id.

    Items are keyed by `track_by` when given, by the tree id in tree mode,
    and by their "id" field otherwise.
    """
    for item in index.items:
        if track_by is not None:
            key = get_trackable_value(track_by, item)
        elif index.is_tree:
            key = index.get_id(item)
        else:
            key = get_item_value(item, "id")
        if key is not None and to_text(key) == item_id:
            return item
    return None


def resolve_expanded(
    items: list[Any], get_id: Callable[[Any], Hashable], expand: tuple[str, ...]
) -> set[Hashable]:
    """Map expanded ids given as text to the ids the tree uses."""
    wanted = set(expand)
    resolved = {get_id(item) for item in items if to_text(get_id(item)) in wanted}
    found = {to_text(item_id) for item_id in resolved}
    for item_id in expand:
        if item_id not in found:
            logger.warning("Unknown item id: %s", item_id)
    return resolved


def load_query(value: str):
    """Load a query from inline JSON or a JSON file."""
    text = value if value.lstrip().startswith("{") else Path(value).read_text()
    try:
        return query_from_dict(msgspec.json.decode(text))
    except msgspec.DecodeError as e:
        raise click.BadParameter(f"Invalid query JSON: {e}", param_hint="--query")


@click.group(cls=CollectionKitGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress warnings")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.version_option(
    version=__version__,
    prog_name="collectionkit",
    message="collectionkit version %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context, verbose: bool, quiet: bool, no_color: bool, debug: bool
) -> None:
    """Filter, sort, paginate and select items from a data file."""
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["console"] = create_console(no_color=no_color)


@cli.command()
@click.argument("items_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--query", "query_value", help="Property filter query (JSON or file)")
@click.option("--filter", "filtering_text", help="Free-text filter")
@click.option("--sort", "sort_field", help="Field to sort by")
@click.option("--desc", is_flag=True, help="Sort in descending order")
@click.option("--page", type=int, help="Page to show (1-based)")
@click.option("--page-size", type=int, help="Items per page")
@click.option("--expand", multiple=True, help="Expand an item by id (repeatable)")
@click.option("--select", "select_ids", multiple=True, help="Toggle an item by id")
@click.option("--select-all", is_flag=True, help="Toggle all items")
@click.option("--columns", help="Comma-separated columns to show")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
)
@click.pass_context
def process(
    ctx: click.Context,
    items_file: Path,
    config_path: Path | None,
    query_value: str | None,
    filtering_text: str | None,
    sort_field: str | None,
    desc: bool,
    page: int | None,
    page_size: int | None,
    expand: tuple[str, ...],
    select_ids: tuple[str, ...],
    select_all: bool,
    columns: str | None,
    output_format: str,
) -> None:
    """Process ITEMS_FILE and show the resulting page."""
    console: Console = ctx.obj["console"]
    items = load_items(items_file)
    config = load_config(config_path)
    options = build_options(config)

    if page_size is not None:
        options = dataclasses.replace(
            options, pagination=PaginationOptions(page_size=page_size)
        )
    if sort_field and options.sorting is None:
        options = dataclasses.replace(options, sorting=SortingOptions())
    if (select_ids or select_all) and options.selection is None:
        options = dataclasses.replace(
            options,
            selection=SelectionOptions(
                track_by=config.get("track_by"), group_selection=True
            ),
        )
    elif (select_ids or select_all) and not options.selection.group_selection:
        options = dataclasses.replace(
            options,
            selection=dataclasses.replace(options.selection, group_selection=True),
        )

    sorting_state = None
    if sort_field:
        sorting_state = SortingState(
            sorting_column=SortingColumn(sorting_field=sort_field), is_descending=desc
        )

    expanded_items = None
    if expand:
        expanded_items = (
            resolve_expanded(items, options.tree.get_id, expand)
            if options.tree is not None
            else set(expand)
        )

    state = CollectionState(
        filtering_text=filtering_text,
        property_filtering_query=load_query(query_value) if query_value else None,
        sorting_state=sorting_state,
        current_page_index=page,
        expanded_items=expanded_items,
    )

    try:
        result = process_items(items, state, options)
    except CollectionError as e:
        raise click.ClickException(str(e))

    if result.selection_tree is not None:
        selection_tree = result.selection_tree
        if select_all:
            selection_tree = selection_tree.toggle_all()
        requested = [
            find_item(result.items_tree, item_id, options.selection.track_by)
            for item_id in select_ids
        ]
        missing = [i for i, item in zip(select_ids, requested) if item is None]
        for item_id in missing:
            logger.warning("Unknown item id: %s", item_id)
        found = [item for item in requested if item is not None]
        if found:
            selection_tree = selection_tree.toggle_some(found)
        result = dataclasses.replace(result, selection_tree=selection_tree)

    if output_format == "json":
        click.echo(result_to_json(result))
    else:
        print_result(
            console, result, columns.split(",") if columns else config.get("columns")
        )


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
