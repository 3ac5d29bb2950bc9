"""Fixtures for tree tests.

Items are dotted strings: "b.1.2" is a child of "b.1", which is a child
of "b".
"""

import pytest

from collectionkit.tree import SelectionState, SelectionTree, build_index


def dotted_parent(item):
    parts = item.split(".")
    return None if len(parts) == 1 else ".".join(parts[:-1])


@pytest.fixture
def dotted_index():
    """Factory building a TreeIndex over dotted string items."""

    def factory(items, expanded_items=()):
        return build_index(items, lambda item: item, dotted_parent, expanded_items)

    return factory


@pytest.fixture
def selection_tree(dotted_index):
    """Factory building a SelectionTree over dotted string items."""

    def factory(items, inverted=False, toggled=(), is_complete=None):
        state = SelectionState(inverted=inverted, toggled_items=tuple(toggled))
        return SelectionTree.from_index(
            dotted_index(items), state, is_complete=is_complete
        )

    return factory


@pytest.fixture
def sample_items():
    return ["a", "a.1", "b", "b.1", "b.1.1", "b.1.2", "c", "c.1", "c.2"]
