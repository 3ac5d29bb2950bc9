"""Configuration management for the CLI.

A configuration file describes how a collection is processed:

    track_by: id
    tree:
      id_field: id
      parent_field: parent
      expanded: [a, b]
    filtering:
      fields: [name, status]
    properties:
      - key: status
        operators:
          - {operator: "=", token_type: enum}
      - key: created
        operators:
          - {operator: ">", match: date}
    sorting:
      field: name
      descending: false
    pagination:
      page_size: 20
    selection:
      group_selection: true
"""

import os
from pathlib import Path
from typing import Any

import yaml

from collectionkit.core.trackby import get_item_value
from collectionkit.operations.filter import FilteringOptions
from collectionkit.operations.pipeline import (
    CollectionOptions,
    PaginationOptions,
    PropertyFilteringOptions,
    SelectionOptions,
    SortingOptions,
    TreeOptions,
)
from collectionkit.operations.sort import SortingColumn, SortingState
from collectionkit.query.models import FilteringProperty, OperatorSpec


class Config:
    """Configuration management for the CLI application."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ValueError(f"Error reading config file: {e}")

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "collectionkit" / "config.yaml")

        # Project config
        paths.append(Path(".collectionkit.yaml"))
        paths.append(Path("collectionkit.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from files and environment variables.

    An explicit path is merged last, after the default locations.
    """
    config: dict[str, Any] = {}

    # Last one wins for conflicting keys
    for default_path in Config.get_config_paths():
        if default_path.exists():
            config = Config.merge_configs(config, Config.from_file(default_path))
    if path is not None:
        config = Config.merge_configs(config, Config.from_file(path))

    env_overrides: dict[str, Any] = {}
    if page_size := os.environ.get("COLLECTIONKIT_PAGE_SIZE"):
        try:
            env_overrides["pagination"] = {"page_size": int(page_size)}
        except ValueError:
            raise ValueError(f"Invalid COLLECTIONKIT_PAGE_SIZE: {page_size!r}")
    if track_by := os.environ.get("COLLECTIONKIT_TRACK_BY"):
        env_overrides["track_by"] = track_by

    return Config.merge_configs(config, env_overrides)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _field_getter(field_name: str):
    return lambda item: get_item_value(item, field_name)


def _operator_spec(raw: Any) -> str | OperatorSpec:
    if isinstance(raw, dict):
        if "operator" not in raw:
            raise ValueError(f"Operator entry without 'operator': {raw!r}")
        return OperatorSpec(
            operator=str(raw["operator"]),
            match=raw.get("match"),
            token_type=raw.get("token_type"),
        )
    return str(raw)


def _filtering_property(raw: dict[str, Any]) -> FilteringProperty:
    if "key" not in raw:
        raise ValueError(f"Filtering property without 'key': {raw!r}")
    return FilteringProperty(
        key=str(raw["key"]),
        operators=tuple(_operator_spec(op) for op in raw.get("operators", ())),
        default_operator=str(raw.get("default_operator", "=")),
    )


def build_options(config: dict[str, Any]) -> CollectionOptions:
    """Convert a configuration dictionary to collection options."""
    track_by = config.get("track_by")

    tree = None
    if tree_config := config.get("tree"):
        tree = TreeOptions(
            get_id=_field_getter(tree_config.get("id_field", "id")),
            get_parent_id=_field_getter(tree_config.get("parent_field", "parent")),
            default_expanded=tuple(tree_config.get("expanded", ())),
        )

    filtering = None
    if "filtering" in config:
        filtering_config = config["filtering"] or {}
        fields = filtering_config.get("fields")
        filtering = FilteringOptions(fields=tuple(fields) if fields else None)

    property_filtering = None
    if properties := config.get("properties"):
        property_filtering = PropertyFilteringOptions(
            filtering_properties=tuple(_filtering_property(p) for p in properties)
        )

    sorting = None
    if "sorting" in config:
        sorting_config = config["sorting"] or {}
        default_state = None
        if sorting_field := sorting_config.get("field"):
            default_state = SortingState(
                sorting_column=SortingColumn(sorting_field=sorting_field),
                is_descending=bool(sorting_config.get("descending", False)),
            )
        sorting = SortingOptions(default_state=default_state)

    pagination = None
    if "pagination" in config:
        pagination_config = config["pagination"] or {}
        pagination = PaginationOptions(
            page_size=int(pagination_config.get("page_size", 10))
        )

    selection = None
    if "selection" in config:
        selection_config = config["selection"] or {}
        selection = SelectionOptions(
            track_by=track_by,
            keep_selection=bool(selection_config.get("keep_selection", False)),
            group_selection=bool(selection_config.get("group_selection", False)),
        )

    return CollectionOptions(
        filtering=filtering,
        property_filtering=property_filtering,
        sorting=sorting,
        pagination=pagination,
        selection=selection,
        tree=tree,
    )
