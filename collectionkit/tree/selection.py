"""Tri-state selection over a forest.

Selection is stored as an inversion flag plus a minimal set of toggled
items. The effective selection of a node is its own toggle XOR the
selection inherited from its parent, with the synthetic root carrying the
inversion flag. "Select all" and "select all except a few" therefore cost
as many toggles as there are boundaries between selected and unselected
regions, not as many as there are items.

A node with children is a group: groups do not count towards selected
item counters and are never returned as selected items.

SelectionTree instances are immutable from the outside. Every transition
returns a new instance; the receiver is left unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import msgspec

from collectionkit.core.trackby import TrackBy, get_trackable_value

T = TypeVar("T")


class _RootKey:
    """Sentinel key of the synthetic root holding the inversion flag."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "ROOT"


ROOT_KEY = _RootKey()


class SelectionState(msgspec.Struct, frozen=True, rename="camel"):
    """Canonical selection state: inversion flag and toggled items."""

    inverted: bool = False
    toggled_items: tuple[Any, ...] = ()


@dataclass(frozen=True)
class SelectionTreeProps:
    """How the selection tree reads the caller's forest.

    Attributes:
        get_children: Children of an item, in display order
        is_complete: Whether the children of an item (None for the root)
            are fully loaded; incomplete parents are never normalized
        track_by: Item identity projection
    """

    get_children: Callable[[Any], Sequence[Any]]
    is_complete: Callable[[Any], bool] | None = None
    track_by: TrackBy = None


class _Layout:
    """Structure of a forest, shared by every tree derived from it."""

    def __init__(self, roots: Sequence[Any], props: SelectionTreeProps):
        self.props = props
        self.key_to_item: dict[Hashable, Any] = {}
        self.children: dict[Hashable, list[Hashable]] = {}
        self.root_keys: list[Hashable] = []
        # Pre-order of item keys, used for top-down passes.
        self.pre_order: list[Hashable] = []
        # Buckets hold a parent key followed by its children keys; deepest
        # level first, pre-order within a level.
        self.buckets: list[list[Hashable]] = []

        levels: dict[int, list[list[Hashable]]] = {}
        root_bucket: list[Hashable] = [ROOT_KEY]
        stack: list[tuple[Any, int]] = []
        for item in reversed(list(roots)):
            stack.append((item, 1))
        for item in roots:
            key = self.key(item)
            root_bucket.append(key)
            self.root_keys.append(key)

        while stack:
            item, level = stack.pop()
            key = self.key(item)
            self.key_to_item[key] = item
            self.pre_order.append(key)
            children = list(props.get_children(item))
            child_keys = [self.key(child) for child in children]
            self.children[key] = child_keys
            levels.setdefault(level, []).append([key, *child_keys])
            for child in reversed(children):
                stack.append((child, level + 1))

        levels[0] = [root_bucket]
        for level in sorted(levels, reverse=True):
            self.buckets.extend(levels[level])

    def key(self, item: Any) -> Hashable:
        return get_trackable_value(self.props.track_by, item)

    def item_for_key(self, key: Hashable) -> Any | None:
        if key is ROOT_KEY:
            return None
        return self.key_to_item.get(key)

    def is_group(self, key: Hashable) -> bool:
        return bool(self.children.get(key))

    def is_complete(self, key: Hashable) -> bool:
        if self.props.is_complete is None:
            return True
        return self.props.is_complete(self.item_for_key(key)) is not False


class SelectionTree(Generic[T]):
    """Tri-state selection with copy-on-write transitions."""

    def __init__(
        self,
        roots: Sequence[T],
        props: SelectionTreeProps,
        state: SelectionState,
        *,
        _layout: _Layout | None = None,
    ):
        """Create a selection tree.

        Args:
            roots: Root items of the forest
            props: Children lookup, completeness predicate and identity
            state: Selection state to start from; it is normalized
        """
        self._roots = roots
        self._props = props
        self._layout = _layout or _Layout(roots, props)

        # Ordered set: dict keys keep insertion order.
        self._toggled: dict[Hashable, None] = {}
        if state.inverted:
            self._toggled[ROOT_KEY] = None
        for item in state.toggled_items:
            self._toggled[self._layout.key(item)] = None

        self._compute_state()

    @classmethod
    def from_index(
        cls,
        index: Any,
        state: SelectionState,
        *,
        is_complete: Callable[[Any], bool] | None = None,
        track_by: TrackBy = None,
    ) -> SelectionTree[T]:
        """Create a selection tree over the forest described by a TreeIndex.

        Items are identified with the index's id function unless a
        track_by is given.
        """
        props = SelectionTreeProps(
            get_children=index.get_children,
            is_complete=is_complete,
            track_by=track_by if track_by is not None else index.get_id,
        )
        return cls(index.roots, props, state)

    # Queries

    def is_item_selected(self, item: T) -> bool:
        return self._layout.key(item) in self._selected

    def is_item_indeterminate(self, item: T) -> bool:
        return self._layout.key(item) in self._indeterminate

    def is_all_items_selected(self) -> bool:
        return ROOT_KEY in self._selected and ROOT_KEY not in self._indeterminate

    def is_all_items_indeterminate(self) -> bool:
        return ROOT_KEY in self._indeterminate

    def get_selected_items_count(self, item: T | None = None) -> int:
        """Count selected leaves under an item, or in the whole tree."""
        key = ROOT_KEY if item is None else self._layout.key(item)
        return self._selected_count.get(key, 0)

    def get_selected_items(self) -> list[T]:
        """Return selected leaf items in tree order."""
        return list(self._selected_items)

    def get_state(self) -> SelectionState:
        """Return the normalized state, dropping keys with no known item."""
        toggled = []
        for key in self._toggled:
            item = self._layout.item_for_key(key)
            if item is not None:
                toggled.append(item)
        return SelectionState(
            inverted=ROOT_KEY in self._toggled, toggled_items=tuple(toggled)
        )

    # Transitions

    def toggle_all(self) -> SelectionTree[T]:
        """Select everything, or clear the selection if all is selected."""
        state = SelectionState(inverted=not self.is_all_items_selected())
        return SelectionTree(self._roots, self._props, state, _layout=self._layout)

    def toggle_some(self, requested_items: Sequence[T]) -> SelectionTree[T]:
        """Toggle a batch of items towards the state implied by the last one.

        If the last requested item is fully selected the whole batch is
        deselected; otherwise the whole batch is selected. Toggles below
        each requested item are cleared.
        """
        clone = self._clone()
        if not requested_items:
            return clone
        last_key = clone._layout.key(requested_items[-1])
        is_parent_selected = last_key in clone._parent_selected
        is_selected = last_key in clone._selected
        is_indeterminate = last_key in clone._indeterminate
        next_selected = not (is_selected and not is_indeterminate)
        next_self_selected = is_parent_selected != next_selected

        for item in requested_items:
            clone._unselect_deep(item)
            if next_self_selected:
                clone._toggled[clone._layout.key(item)] = None
        clone._compute_state()
        return clone

    def invert_all(self) -> SelectionTree[T]:
        """Flip the inversion flag and the toggles of the root items."""
        clone = self._clone()
        clone._toggle_key(ROOT_KEY)
        for key in clone._layout.root_keys:
            clone._toggle_key(key)
        clone._compute_state()
        return clone

    def invert_one(self, item: T) -> SelectionTree[T]:
        """Invert one item while keeping the selection of its descendants."""
        clone = self._clone()
        clone._toggle_key(clone._layout.key(item))
        for child in self._props.get_children(item):
            clone._toggle_key(clone._layout.key(child))
        clone._compute_state()
        return clone

    # Internals

    def _clone(self) -> SelectionTree[T]:
        return SelectionTree(
            self._roots, self._props, self.get_state(), _layout=self._layout
        )

    def _toggle_key(self, key: Hashable) -> None:
        if key in self._toggled:
            del self._toggled[key]
        else:
            self._toggled[key] = None

    def _unselect_deep(self, item: T) -> None:
        layout = self._layout
        stack = [layout.key(item)]
        while stack:
            key = stack.pop()
            self._toggled.pop(key, None)
            stack.extend(layout.children.get(key, ()))

    def _normalize(self) -> None:
        toggled = self._toggled
        for bucket in self._layout.buckets:
            if len(bucket) == 1:
                continue
            selected_count = 0
            for key in reversed(bucket):
                if key in toggled:
                    selected_count += 1
                else:
                    break
            if not self._layout.is_complete(bucket[0]):
                continue
            # All children toggled but not the parent: toggle the parent only.
            if selected_count == len(bucket) - 1 and bucket[0] not in toggled:
                for key in bucket:
                    toggled.pop(key, None)
                toggled[bucket[0]] = None
            # Parent and all children toggled: the toggles cancel out.
            if selected_count == len(bucket):
                for key in bucket:
                    toggled.pop(key, None)

    def _compute_state(self) -> None:
        layout = self._layout
        self._normalize()
        toggled = self._toggled

        self._selected: set[Hashable] = set()
        self._parent_selected: set[Hashable] = set()
        self._indeterminate: set[Hashable] = set()
        self._selected_count: dict[Hashable, int] = {}
        self._selected_items: list[T] = []

        root_selected = ROOT_KEY in toggled
        if root_selected and layout.root_keys:
            self._selected.add(ROOT_KEY)

        # Top-down: pre-order guarantees parents are resolved first.
        inherited: dict[Hashable, bool] = {key: root_selected for key in layout.root_keys}
        for key in layout.pre_order:
            parent_selected = inherited[key]
            is_selected = (key in toggled) != parent_selected
            if is_selected:
                self._selected.add(key)
            if parent_selected:
                self._parent_selected.add(key)
            for child_key in layout.children[key]:
                inherited[child_key] = is_selected

        # Bottom-up: a parent is indeterminate when any child is toggled or
        # itself indeterminate.
        for bucket in layout.buckets:
            for key in bucket[1:]:
                if key in toggled or key in self._indeterminate:
                    self._indeterminate.add(bucket[0])
                    break

        counts = self._selected_count
        for key in reversed(layout.pre_order):
            count = 0 if layout.is_group(key) or key not in self._selected else 1
            for child_key in layout.children[key]:
                count += counts[child_key]
            counts[key] = count
        counts[ROOT_KEY] = sum(counts[key] for key in layout.root_keys)

        for key in layout.pre_order:
            if key in self._selected and not layout.is_group(key):
                self._selected_items.append(layout.key_to_item[key])
