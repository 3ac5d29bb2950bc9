"""Tests for date-aware matching."""

import logging
from datetime import date, datetime

import msgspec
import pytest

from collectionkit.query import (
    DateRange,
    Token,
    TokenGroup,
    match_date,
    match_date_is_after,
    match_date_is_after_or_equal,
    match_date_is_before,
    match_date_is_before_or_equal,
    match_date_is_equal,
    match_date_is_not_equal,
    parse_date,
    parse_date_token,
)

NOW = datetime(2024, 5, 10, 12, 0, 0)

ITEMS = [
    {"date": "2020-01-01", "dateTime": "2020-01-01T15:30:00"},
    {"date": "2020-01-02", "dateTime": "2020-01-02T02:22:21"},
    {"date": "2020-01-02", "dateTime": "2020-01-02T02:22:22"},
    {"date": "2020-01-02", "dateTime": "2020-01-02T02:22:23"},
    {"date": "2020-01-02", "dateTime": "2020-01-02T23:59:59"},
    {"date": "2020-01-03", "dateTime": "2020-01-03T13:33:33"},
]


def single(property_key, operator, value):
    return TokenGroup(
        tokens=(Token(operator=operator, value=value, property_key=property_key),)
    )


def pick(*indices):
    return [ITEMS[i] for i in indices]


def absolute(start, end):
    return msgspec.json.encode(
        {"type": "absolute", "startDate": start, "endDate": end}
    ).decode()


def relative(unit, amount):
    return msgspec.json.encode(
        {"type": "relative", "unit": unit, "amount": amount}
    ).decode()


class TestParsing:
    def test_parse_date_values(self):
        assert parse_date("2020-01-02") == datetime(2020, 1, 2)
        assert parse_date("2020-01-02T03:04:05") == datetime(2020, 1, 2, 3, 4, 5)
        assert parse_date(date(2020, 1, 2)) == datetime(2020, 1, 2)
        assert parse_date(datetime(2020, 1, 2, 3)) == datetime(2020, 1, 2, 3)

    @pytest.mark.parametrize("value", [None, "", "  ", "not a date", "2020-13-45", 42])
    def test_invalid_values(self, value):
        assert parse_date(value) is None

    def test_date_only_token_covers_the_day(self):
        value_range = parse_date_token("2020-01-02")
        assert value_range == DateRange(
            datetime(2020, 1, 2), datetime(2020, 1, 2, 23, 59, 59, 999999)
        )

    def test_date_time_token_is_an_instant(self):
        instant = datetime(2020, 1, 2, 3, 4, 5)
        assert parse_date_token("2020-01-02T03:04:05") == DateRange(instant, instant)

    def test_round_to_day(self):
        value_range = parse_date_token("2020-01-02T03:04:05", round_to_day=True)
        assert value_range.start == datetime(2020, 1, 2)

    def test_relative_range(self):
        value_range = parse_date_token(relative("week", 1), now=NOW)
        assert value_range == DateRange(datetime(2024, 5, 3, 12), NOW)

    def test_relative_months(self):
        value_range = parse_date_token(relative("month", 3), now=NOW)
        assert value_range.start == datetime(2024, 2, 10, 12)

    @pytest.mark.parametrize(
        "value",
        [
            relative("fortnight", 1),
            relative("day", "one"),
            relative("day", True),
            absolute("2020-01-01", "garbage"),
            '{"type": "unknown"}',
            "[1, 2]",
            "{not json",
            12,
        ],
    )
    def test_malformed_tokens(self, value):
        assert parse_date_token(value, now=NOW) is None


class TestDateProperty:
    """Properties declared with the "date" matcher compare whole days."""

    @pytest.mark.parametrize(
        "operator,value,expected",
        [
            ("=", "2020-01-02", [1, 2, 3, 4]),
            ("!=", "2020-01-02", [0, 5]),
            ("<", "2020-01-02", [0]),
            ("<=", "2020-01-02", [0, 1, 2, 3, 4]),
            (">", "2020-01-02", [5]),
            (">=", "2020-01-02", [1, 2, 3, 4, 5]),
            ("IN", "2020-01-02", [1, 2, 3, 4]),
        ],
    )
    def test_operators(self, date_evaluator, operator, value, expected):
        result = date_evaluator.filter(ITEMS, single("date", operator, value))
        assert result == pick(*expected)

    def test_date_time_token_rounded(self, date_evaluator):
        result = date_evaluator.filter(ITEMS, single("date", "=", "2020-01-02T10:00:00"))
        assert result == pick(1, 2, 3, 4)

    def test_date_time_items_match_day(self, date_evaluator):
        result = date_evaluator.filter(ITEMS, single("dateTime", "=", "2020-01-02"))
        assert result == pick(1, 2, 3, 4)

    def test_absolute_range(self, date_evaluator):
        token_value = absolute("2020-01-01", "2020-01-02")
        result = date_evaluator.filter(ITEMS, single("date", "=", token_value))
        assert result == pick(0, 1, 2, 3, 4)

    def test_date_objects(self, date_evaluator):
        items = [{"date": date(2020, 1, 1)}, {"date": datetime(2020, 1, 2, 8)}]
        result = date_evaluator.filter(items, single("date", "=", "2020-01-02"))
        assert result == [items[1]]

    def test_invalid_item_values_do_not_match(self, date_evaluator):
        items = [{"date": None}, {"date": ""}, {"date": "soon"}]
        assert date_evaluator.filter(items, single("date", "!=", "2020-01-02")) == []

    def test_unsupported_operator_warns_once(self, date_evaluator, diagnostics, caplog):
        with caplog.at_level(logging.WARNING):
            result = date_evaluator.filter(ITEMS, single("date", ":", "2020"))

        assert result == []
        assert len(diagnostics) == 1
        assert "Unsupported operator ':'" in diagnostics.messages[0]


class TestDateTimeProperty:
    """Properties declared with the "datetime" matcher compare instants."""

    @pytest.mark.parametrize(
        "operator,expected",
        [
            ("=", [2]),
            ("!=", [0, 1, 3, 4, 5]),
            ("<", [0, 1]),
            ("<=", [0, 1, 2]),
            (">", [3, 4, 5]),
            (">=", [2, 3, 4, 5]),
        ],
    )
    def test_operators(self, date_evaluator, operator, expected):
        q = single("dateTime", operator, "2020-01-02T02:22:22")
        assert date_evaluator.filter(ITEMS, q) == pick(*expected)

    def test_date_only_token_covers_the_day(self, date_evaluator):
        q = single("dateTime", "=", "2020-01-02")
        assert date_evaluator.filter(ITEMS, q) == pick(1, 2, 3, 4)

    def test_absolute_range_keeps_time(self, date_evaluator):
        token_value = absolute("2020-01-02T02:22:22", "2020-01-02T23:59:59")
        q = single("dateTime", "=", token_value)
        assert date_evaluator.filter(ITEMS, q) == pick(2, 3, 4)

    def test_relative_range(self, date_evaluator):
        items = [
            {"dateTime": "2024-05-10T08:00:00"},
            {"dateTime": "2024-05-09T13:00:00"},
            {"dateTime": "2024-05-08T12:00:00"},
            {"dateTime": "2024-05-11T00:00:00"},
        ]
        q = single("dateTime", "=", relative("day", 1))
        assert date_evaluator.filter(items, q) == items[:2]

    def test_timezone_aware_values(self, date_evaluator):
        items = [{"dateTime": "2020-01-01T12:00:00+01:00"}]
        q = single("dateTime", "=", "2020-01-01T11:00:00Z")
        assert date_evaluator.filter(items, q) == items


class TestMatchDate:
    def test_unknown_operator_does_not_match(self):
        assert match_date("2020-01-01", "2020-01-01", "^") is False

    def test_defaults_to_day_granularity(self):
        assert match_date("2020-01-01T23:00:00", "2020-01-01T01:00:00", "=") is True
        assert (
            match_date(
                "2020-01-01T23:00:00",
                "2020-01-01T01:00:00",
                "=",
                granularity="datetime",
            )
            is False
        )


MATCHERS = {
    "=": match_date_is_equal,
    "!=": match_date_is_not_equal,
    ">": match_date_is_after,
    ">=": match_date_is_after_or_equal,
    "<": match_date_is_before,
    "<=": match_date_is_before_or_equal,
}


@pytest.mark.parametrize(
    "value,value_to_compare,expected",
    [
        (date(2020, 1, 1), "2020-01-01", {"=", "<=", ">="}),
        (date(2020, 1, 1), "2020-01-02", {"!=", "<", "<="}),
        (date(2020, 1, 1), "2019-12-31", {"!=", ">", ">="}),
        (datetime(2020, 1, 1, 12), "2020-01-01", {"=", "<=", ">="}),
        (datetime(2020, 1, 1), "2020-01-01T00:00:00", {"=", "<=", ">="}),
        (datetime(2020, 1, 1, 0, 0, 1), "2020-01-01T00:00:00", {"!=", ">", ">="}),
        (datetime(2020, 1, 1), "2020-01-01T00:00:01", {"!=", "<", "<="}),
        ("2020-01-01Txx:xx:xx", "2020-01-01T00:00:00", {"!="}),
        (datetime(2020, 1, 1), "2020-01-01Txx:xx:xx", {"!="}),
    ],
)
def test_matchers(value, value_to_compare, expected):
    for operator, matcher in MATCHERS.items():
        assert matcher(value, value_to_compare) is (operator in expected), operator
