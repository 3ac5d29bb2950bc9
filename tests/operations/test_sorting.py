"""Tests for sorting."""

import pytest

from collectionkit.operations import SortingColumn, SortingState, create_comparator, sort_items


def by_field(field, descending=False):
    return SortingState(SortingColumn(sorting_field=field), is_descending=descending)


def suffix_comparator(a, b):
    """Ignore the prefix and compare only the numbers."""
    first, second = a["id"].split("-")[1], b["id"].split("-")[1]
    return 0 if first == second else 1 if first > second else -1


class TestFieldSorting:
    def test_no_state_keeps_order(self):
        items = [{"id": 1}, {"id": 3}, {"id": 2}]
        assert sort_items(items, None) == items

    def test_ascending(self):
        items = [{"id": 1}, {"id": 3}, {"id": 4}, {"id": 2}]
        assert sort_items(items, by_field("id")) == [
            {"id": 1},
            {"id": 2},
            {"id": 3},
            {"id": 4},
        ]

    def test_descending(self):
        items = [{"id": 1}, {"id": 2}, {"id": 3}, {"id": 4}]
        assert sort_items(items, by_field("id", descending=True)) == items[::-1]

    def test_missing_values_are_deterministic(self):
        items = [
            {"id": 1, "value": "b"},
            {"id": 2},
            {"id": 3, "value": None},
            {"id": 4, "value": "a"},
        ]

        assert sort_items(items, by_field("value")) == [
            items[1],
            items[2],
            items[3],
            items[0],
        ]
        assert sort_items(items, by_field("value", descending=True)) == [
            items[0],
            items[3],
            items[1],
            items[2],
        ]

    def test_mixed_types(self):
        items = [{"id": 1}, {"id": "4"}, {"id": "2"}, {"id": 3}]
        assert sort_items(items, by_field("id")) == [
            {"id": 1},
            {"id": "2"},
            {"id": 3},
            {"id": "4"},
        ]

    def test_locale_aware_strings(self):
        items = [{"id": "b"}, {"id": "a"}, {"id": "ä"}, {"id": "á"}]
        assert [item["id"] for item in sort_items(items, by_field("id"))] == [
            "a",
            "á",
            "ä",
            "b",
        ]

    def test_case_insensitive(self):
        items = [{"id": "A"}, {"id": "B"}, {"id": "a"}, {"id": "b"}]
        assert [item["id"] for item in sort_items(items, by_field("id"))] == [
            "a",
            "A",
            "b",
            "B",
        ]

    def test_attribute_access(self):
        class Row:
            def __init__(self, name):
                self.name = name

        rows = [Row("b"), Row("a")]
        assert [row.name for row in sort_items(rows, by_field("name"))] == ["a", "b"]

    def test_does_not_modify_input(self):
        items = [{"id": 2}, {"id": 1}]
        sort_items(items, by_field("id"))
        assert items == [{"id": 2}, {"id": 1}]


class TestComparatorSorting:
    items = [{"id": "a-3"}, {"id": "b-2"}, {"id": "c-1"}, {"id": "d-4"}]

    @pytest.mark.parametrize(
        "descending,expected",
        [
            (False, ["c-1", "b-2", "a-3", "d-4"]),
            (True, ["d-4", "a-3", "b-2", "c-1"]),
        ],
    )
    def test_uses_comparator(self, descending, expected):
        state = SortingState(
            SortingColumn(sorting_comparator=suffix_comparator), is_descending=descending
        )
        assert [item["id"] for item in sort_items(self.items, state)] == expected

    def test_comparator_takes_precedence_over_field(self):
        column = SortingColumn(sorting_field="id", sorting_comparator=suffix_comparator)
        result = sort_items(self.items, SortingState(column))
        assert [item["id"] for item in result] == ["c-1", "b-2", "a-3", "d-4"]

    def test_empty_column_keeps_order(self):
        assert create_comparator(SortingState(SortingColumn())) is None
        assert sort_items(self.items, SortingState(SortingColumn())) == self.items
