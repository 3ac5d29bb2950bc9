"""Hierarchical index over a flat item list.

The index resolves parent/child relationships once per call and answers
visibility, level, children and ordering questions without walking the
tree again. Items are identified by `get_id` and point at their parent
through `get_parent_id`; without these functions the index describes a
flat collection.

Ordering uses a dimensioned key: the tuple of input positions along the
path from the root to the item. Sorting on that key yields hierarchical
pre-order with no bound on depth or sibling count.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any, Generic, TypeVar

from collectionkit.core.trackby import IdentityKey

T = TypeVar("T")

GetId = Callable[[Any], Hashable]
GetParentId = Callable[[Any], Hashable | None]


class TreeIndex(Generic[T]):
    """Parent/child relationships, levels and order keys of a flat list."""

    def __init__(
        self,
        items: Sequence[T],
        get_id: GetId | None = None,
        get_parent_id: GetParentId | None = None,
        expanded_items: Iterable[Hashable] = (),
    ):
        """Build the index.

        Args:
            items: Flat item list (not modified)
            get_id: Item identity function; enables tree mode together
                with get_parent_id
            get_parent_id: Parent identity function returning None for roots
            expanded_items: Ids of expanded items
        """
        self.items: list[T] = list(items)
        self.expanded_items = frozenset(expanded_items)
        self.is_tree = get_id is not None and get_parent_id is not None
        self._get_id = get_id if get_id is not None else IdentityKey
        self._get_parent_id = get_parent_id

        self._id_to_item: dict[Hashable, T] = {}
        self._id_to_index: dict[Hashable, int] = {}
        for index, item in enumerate(self.items):
            item_id = self._get_id(item)
            if item_id not in self._id_to_item:
                self._id_to_item[item_id] = item
                self._id_to_index[item_id] = index

        self._parent: dict[Hashable, Hashable | None] = {}
        self._order: dict[Hashable, tuple[int, ...]] = {}
        self._children: dict[Hashable, list[T]] = {}
        self._visible: dict[Hashable, bool] = {}
        self.roots: list[T] = []

        if self.is_tree:
            self._resolve()
        else:
            for item_id, index in self._id_to_index.items():
                self._parent[item_id] = None
                self._order[item_id] = (index,)
        for item_id, index in self._id_to_index.items():
            parent_id = self._parent[item_id]
            item = self._id_to_item[item_id]
            if parent_id is None:
                self.roots.append(item)
            else:
                self._children.setdefault(parent_id, []).append(item)

    def _declared_parent(self, item_id: Hashable) -> Hashable | None:
        assert self._get_parent_id is not None
        parent_id = self._get_parent_id(self._id_to_item[item_id])
        if parent_id is None or parent_id not in self._id_to_item:
            return None
        return parent_id

    def _resolve(self) -> None:
        """Resolve parents and order keys, walking up to resolved ancestors."""
        for item_id in self._id_to_index:
            if item_id in self._order:
                continue
            path: list[Hashable] = []
            on_path: set[Hashable] = set()
            current: Hashable | None = item_id
            while current is not None and current not in self._order:
                if current in on_path:
                    # Cycle: the node where the walk re-enters becomes a root.
                    self._parent[current] = None
                    break
                on_path.add(current)
                path.append(current)
                parent_id = self._declared_parent(current)
                self._parent[current] = parent_id
                current = parent_id

            for node_id in path:
                self._fill_order(node_id)

    def _fill_order(self, item_id: Hashable) -> None:
        pending: list[Hashable] = []
        current: Hashable | None = item_id
        while current is not None and current not in self._order:
            pending.append(current)
            current = self._parent[current]
        for node_id in reversed(pending):
            parent_id = self._parent[node_id]
            prefix = self._order[parent_id] if parent_id is not None else ()
            self._order[node_id] = prefix + (self._id_to_index[node_id],)

    def get_id(self, item: T) -> Hashable:
        return self._get_id(item)

    def contains(self, item: T) -> bool:
        return self._get_id(item) in self._id_to_item

    def get_item(self, item_id: Hashable) -> T | None:
        return self._id_to_item.get(item_id)

    def get_parent(self, item: T) -> T | None:
        """Return the resolved parent of an item, or None for roots."""
        parent_id = self._parent.get(self._get_id(item))
        return None if parent_id is None else self._id_to_item[parent_id]

    def get_children(self, item: T) -> list[T]:
        return self._children.get(self._get_id(item), [])

    def has_children(self, item: T) -> bool:
        return bool(self._children.get(self._get_id(item)))

    def get_level(self, item: T) -> int:
        """Return the depth of an item; roots are at level 1."""
        order = self._order.get(self._get_id(item))
        return len(order) if order else 1

    def get_order(self, item: T) -> tuple[int, ...]:
        """Return the pre-order sort key of an item."""
        item_id = self._get_id(item)
        order = self._order.get(item_id)
        if order is None:
            return (len(self.items),)
        return order

    def is_visible(self, item: T) -> bool:
        """Check that every ancestor of an item is expanded."""
        if not self.is_tree:
            return True
        item_id = self._get_id(item)
        if item_id not in self._parent:
            return True
        chain: list[Hashable] = []
        current: Hashable | None = item_id
        visible = True
        while current is not None:
            if current in self._visible:
                visible = self._visible[current]
                break
            parent_id = self._parent[current]
            chain.append(current)
            if parent_id is not None and parent_id not in self.expanded_items:
                visible = False
                break
            current = parent_id
        # Everything on the walked chain shares the outcome: an unexpanded
        # ancestor hides all of its descendants.
        for node_id in chain:
            self._visible[node_id] = visible
        return visible

    def visible_items(self) -> list[T]:
        """Return visible items in hierarchical pre-order."""
        visible = [item for item in self.items if self.is_visible(item)]
        return self.pre_order(visible)

    def pre_order(self, items: Iterable[T]) -> list[T]:
        return sorted(items, key=self.get_order)

    def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        """Return visible items that match or have a matching descendant.

        The predicate runs over every item, hidden ones included, so a
        collapsed parent stays when one of its descendants matches.
        Results are in hierarchical pre-order.
        """
        kept: set[Hashable] = set()
        for item in reversed(self.pre_order(self.items)):
            item_id = self._get_id(item)
            if item_id in kept or predicate(item):
                kept.add(item_id)
                parent_id = self._parent.get(item_id)
                if parent_id is not None:
                    kept.add(parent_id)
        return [
            item
            for item in self.visible_items()
            if self._get_id(item) in kept
        ]

    def sorted(
        self, items: Iterable[T], comparator: Callable[[T, T], int]
    ) -> list[T]:
        """Sort items hierarchically.

        Siblings are ordered by the comparator; each item stays directly
        below its parent, so the result is a pre-order traversal.
        """
        items = list(items)
        if not self.is_tree:
            return sorted(items, key=functools.cmp_to_key(comparator))

        rank: dict[Hashable, int] = {}
        groups: dict[Hashable | None, list[T]] = {}
        for item in self.items:
            item_id = self._get_id(item)
            groups.setdefault(self._parent.get(item_id), []).append(item)
        for siblings in groups.values():
            ordered = sorted(siblings, key=functools.cmp_to_key(comparator))
            for position, sibling in enumerate(ordered):
                rank[self._get_id(sibling)] = position

        def sort_key(item: T) -> tuple[int, ...]:
            path: list[int] = []
            current: Hashable | None = self._get_id(item)
            while current is not None and current in rank:
                path.append(rank[current])
                current = self._parent.get(current)
            return tuple(reversed(path))

        return sorted(items, key=sort_key)

    def prune_expanded(self, expanded_items: Iterable[Hashable]) -> set[Hashable]:
        """Drop expanded ids that no longer resolve to an item."""
        return {item_id for item_id in expanded_items if item_id in self._id_to_item}


def build_index(
    items: Sequence[T],
    get_id: GetId | None = None,
    get_parent_id: GetParentId | None = None,
    expanded_items: Iterable[Hashable] = (),
) -> TreeIndex[T]:
    """Build a TreeIndex; without id functions every item is a flat root."""
    return TreeIndex(items, get_id, get_parent_id, expanded_items)
