"""Core helpers shared by the tree, query and operations packages."""

from collectionkit.core.diagnostics import Diagnostics
from collectionkit.core.exceptions import (
    CollectionError,
    ConfigurationError,
    QueryDecodeError,
)
from collectionkit.core.trackby import (
    IdentityKey,
    TrackBy,
    get_item_value,
    get_trackable_value,
)
from collectionkit.core.values import (
    fixup_falsy_values,
    locale_compare,
    loose_compare,
    loose_equals,
    loose_greater,
    loose_greater_or_equal,
    loose_less,
    loose_less_or_equal,
    to_text,
)

__all__ = [
    "Diagnostics",
    "CollectionError",
    "ConfigurationError",
    "QueryDecodeError",
    "IdentityKey",
    "TrackBy",
    "get_item_value",
    "get_trackable_value",
    "fixup_falsy_values",
    "locale_compare",
    "loose_compare",
    "loose_equals",
    "loose_greater",
    "loose_greater_or_equal",
    "loose_less",
    "loose_less_or_equal",
    "to_text",
]
