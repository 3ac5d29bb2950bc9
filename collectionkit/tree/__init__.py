"""Hierarchy indexing and tri-state selection."""

from .index import TreeIndex, build_index
from .selection import ROOT_KEY, SelectionState, SelectionTree, SelectionTreeProps

__all__ = [
    "TreeIndex",
    "build_index",
    "ROOT_KEY",
    "SelectionState",
    "SelectionTree",
    "SelectionTreeProps",
]
