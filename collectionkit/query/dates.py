"""Date-aware matching for typed filtering properties.

Token values for date properties describe an interval:

- an ISO-8601 date ("2020-01-01") covers that whole day
- an ISO-8601 date-time ("2020-01-01T10:00:00") is a single instant
- an absolute range, stringified: {"type": "absolute", "startDate": ..., "endDate": ...}
- a relative range, stringified: {"type": "relative", "unit": "day", "amount": 7},
  counting back from now

Comparisons are made against the interval [start, end]. Malformed values
never raise; they simply do not match.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time, timedelta
from typing import Any, NamedTuple

import msgspec
from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

# Operators with defined semantics against a date range.
DATE_OPERATORS = frozenset({"=", "!=", "<", "<=", ">", ">=", "IN"})

RELATIVE_UNITS: dict[str, Callable[[float], timedelta | relativedelta]] = {
    "second": lambda amount: timedelta(seconds=amount),
    "minute": lambda amount: timedelta(minutes=amount),
    "hour": lambda amount: timedelta(hours=amount),
    "day": lambda amount: timedelta(days=amount),
    "week": lambda amount: timedelta(weeks=amount),
    "month": lambda amount: relativedelta(months=int(amount)),
    "year": lambda amount: relativedelta(years=int(amount)),
}


class DateRange(NamedTuple):
    start: datetime
    end: datetime


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_date(value: Any) -> datetime | None:
    """Parse a date value.

    Args:
        value: datetime, date, or ISO-8601 date / date-time string

    Returns:
        Local naive datetime, or None if the value is not a valid date
    """
    if isinstance(value, datetime):
        return _to_local_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return _to_local_naive(isoparse(value.strip()))
    except (ValueError, OverflowError):
        return None


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)


def is_date_only(value: Any) -> bool:
    return isinstance(value, str) and "T" not in value


def _round_to_day(value_range: DateRange) -> DateRange:
    return DateRange(start_of_day(value_range.start), end_of_day(value_range.end))


def relative_date_range(
    unit: Any, amount: Any, now: datetime | None = None
) -> DateRange | None:
    """Create the range ending now and reaching back `amount` units."""
    delta = RELATIVE_UNITS.get(unit) if isinstance(unit, str) else None
    if delta is None or isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return None
    end = now or datetime.now()
    try:
        return DateRange(end - delta(amount), end)
    except (OverflowError, ValueError):
        return None


def _parse_range_value(
    value: str, now: datetime | None, round_to_day: bool
) -> DateRange | None:
    try:
        parsed = msgspec.json.decode(value)
    except msgspec.DecodeError:
        return None
    if not isinstance(parsed, dict):
        return None

    if parsed.get("type") == "absolute":
        start_value, end_value = parsed.get("startDate"), parsed.get("endDate")
        start, end = parse_date(start_value), parse_date(end_value)
        if start is None or end is None:
            return None
        value_range = DateRange(start, end)
        if round_to_day or is_date_only(start_value):
            return _round_to_day(value_range)
        return value_range

    if parsed.get("type") == "relative":
        return relative_date_range(parsed.get("unit"), parsed.get("amount"), now)
    return None


def parse_date_token(
    value: Any, now: datetime | None = None, round_to_day: bool = False
) -> DateRange | None:
    """Parse a date token value into a range.

    Args:
        value: Token value (see module docstring for accepted shapes)
        now: Reference time for relative ranges
        round_to_day: Round absolute values to whole days even if they
            carry a time component

    Returns:
        Range, or None if the value cannot be parsed
    """
    if isinstance(value, (datetime, date)):
        instant = parse_date(value)
        assert instant is not None
        value_range = DateRange(instant, instant)
        if round_to_day or not isinstance(value, datetime):
            return _round_to_day(value_range)
        return value_range
    if not isinstance(value, str):
        return None

    instant = parse_date(value)
    if instant is not None:
        value_range = DateRange(instant, instant)
        if round_to_day or is_date_only(value):
            return _round_to_day(value_range)
        return value_range
    return _parse_range_value(value, now, round_to_day)


def compare_to_range(moment: datetime, operator: str, value_range: DateRange) -> bool:
    """Apply a comparison operator between a moment and a range."""
    start, end = value_range
    match operator:
        case "<":
            return moment < start
        case "<=":
            return moment <= end
        case ">":
            return moment > end
        case ">=":
            return moment >= start
        case "=" | "IN":
            return start <= moment <= end
        case "!=":
            return moment < start or moment > end
        case _:
            return False


def match_date(
    item_value: Any,
    token_value: Any,
    operator: str,
    *,
    granularity: str = "date",
    now: datetime | None = None,
) -> bool:
    """Match an item date against a date token.

    Args:
        item_value: Item date (datetime, date or ISO string)
        token_value: Token value
        operator: One of DATE_OPERATORS
        granularity: "date" compares whole days, "datetime" compares
            instants unless the token is a date-only string
        now: Reference time for relative ranges

    Returns:
        True if the item date satisfies the token
    """
    moment = parse_date(item_value)
    if moment is None:
        return False
    value_range = parse_date_token(
        token_value, now=now, round_to_day=granularity == "date"
    )
    if value_range is None:
        return False
    return compare_to_range(moment, operator, value_range)


def _is_calendar_date(value: Any) -> bool:
    if isinstance(value, datetime):
        return False
    return isinstance(value, date) or is_date_only(value)


def compare_dates(value: Any, value_to_compare: Any) -> float:
    """Compare two dates.

    Date-time values are compared as instants. If either value is a
    calendar date (a date object or a date-only string) both sides are
    compared by day.

    Returns:
        Negative, zero or positive number of seconds; NaN when either
        value is not a valid date
    """
    left, right = parse_date(value), parse_date(value_to_compare)
    if left is None or right is None:
        return float("nan")
    if _is_calendar_date(value) or _is_calendar_date(value_to_compare):
        left, right = start_of_day(left), start_of_day(right)
    return (left - right).total_seconds()


def match_date_is_equal(value: Any, value_to_compare: Any) -> bool:
    return compare_dates(value, value_to_compare) == 0


def match_date_is_not_equal(value: Any, value_to_compare: Any) -> bool:
    return compare_dates(value, value_to_compare) != 0


def match_date_is_before(value: Any, value_to_compare: Any) -> bool:
    return compare_dates(value, value_to_compare) < 0


def match_date_is_before_or_equal(value: Any, value_to_compare: Any) -> bool:
    return compare_dates(value, value_to_compare) <= 0


def match_date_is_after(value: Any, value_to_compare: Any) -> bool:
    return compare_dates(value, value_to_compare) > 0


def match_date_is_after_or_equal(value: Any, value_to_compare: Any) -> bool:
    return compare_dates(value, value_to_compare) >= 0
