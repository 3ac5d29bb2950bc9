"""In-memory collection processing.

Derives the visible page of a flat or hierarchical item list from
filtering, property filtering, sorting, pagination, expansion and
tri-state selection rules.

Subpackages:
- core: identity, value normalization, diagnostics and errors
- tree: hierarchical index and the selection tree
- query: property filter queries and their evaluation
- operations: free-text filter, sorting, pagination and the pipeline
- cli: command line front end
"""

__version__ = "1.0.0"

from collectionkit.core.diagnostics import Diagnostics
from collectionkit.core.exceptions import (
    CollectionError,
    ConfigurationError,
    QueryDecodeError,
)
from collectionkit.operations.pipeline import (
    CollectionOptions,
    CollectionState,
    FilteringOptions,
    PaginationOptions,
    ProcessResult,
    PropertyFilteringOptions,
    SelectionOptions,
    SortingOptions,
    TreeOptions,
    process_items,
)
from collectionkit.operations.sort import SortingColumn, SortingState
from collectionkit.query import (
    FilteringProperty,
    OperatorSpec,
    QueryEvaluator,
    Token,
    TokenGroup,
)
from collectionkit.tree import SelectionState, SelectionTree, TreeIndex, build_index

__all__ = [
    "__version__",
    # Pipeline
    "process_items",
    "CollectionOptions",
    "CollectionState",
    "FilteringOptions",
    "PaginationOptions",
    "PropertyFilteringOptions",
    "SelectionOptions",
    "SortingOptions",
    "TreeOptions",
    "ProcessResult",
    "SortingColumn",
    "SortingState",
    # Query
    "FilteringProperty",
    "OperatorSpec",
    "QueryEvaluator",
    "Token",
    "TokenGroup",
    # Tree
    "TreeIndex",
    "build_index",
    "SelectionState",
    "SelectionTree",
    # Support
    "Diagnostics",
    "CollectionError",
    "ConfigurationError",
    "QueryDecodeError",
]
