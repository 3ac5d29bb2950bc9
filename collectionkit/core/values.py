"""Value normalization and loose comparison.

Item records are heterogeneous: the same field may hold numbers, numeric
strings, booleans or nothing at all. Filters and sorters compare values
with a small set of loose rules so that mixed shapes order and match
predictably:

- two strings compare as strings
- otherwise both sides are converted to numbers; the empty string is 0,
  non-numeric text is NaN, and any comparison involving NaN is false
"""

from __future__ import annotations

import math
import unicodedata
from datetime import date, datetime
from typing import Any

NAN = float("nan")


def fixup_falsy_values(value: Any) -> Any:
    """Normalize falsy item values before default matching.

    Booleans become "true"/"false"; None, NaN and empty strings become "";
    the number zero is kept as a number.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return value


def to_text(value: Any) -> str:
    """Render a value for substring matching."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if value.is_integer():
            return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    return str(value)


def to_number(value: Any) -> float:
    """Convert a value to a number the way loose comparisons do."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return NAN
    if isinstance(value, datetime):
        return value.timestamp() * 1000
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).timestamp() * 1000
    text = str(value).strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return NAN


def _is_text(value: Any) -> bool:
    return isinstance(value, str)


def loose_equals(a: Any, b: Any) -> bool:
    """Loose equality between two item or token values."""
    if _is_text(a) and _is_text(b):
        return a == b
    if isinstance(a, (int, float, str)) and isinstance(b, (int, float, str)):
        left, right = to_number(a), to_number(b)
        return left == right
    try:
        return bool(a == b)
    except TypeError:
        return False


def _ordered(a: Any, b: Any) -> tuple[Any, Any] | None:
    """Return a comparable pair, or None when the values are unordered."""
    if _is_text(a) and _is_text(b):
        return a, b
    if isinstance(a, datetime) and isinstance(b, datetime):
        if (a.tzinfo is None) == (b.tzinfo is None):
            return a, b
    left, right = to_number(a), to_number(b)
    if math.isnan(left) or math.isnan(right):
        return None
    return left, right


def loose_less(a: Any, b: Any) -> bool:
    pair = _ordered(a, b)
    return pair is not None and pair[0] < pair[1]


def loose_less_or_equal(a: Any, b: Any) -> bool:
    pair = _ordered(a, b)
    return pair is not None and pair[0] <= pair[1]


def loose_greater(a: Any, b: Any) -> bool:
    pair = _ordered(a, b)
    return pair is not None and pair[0] > pair[1]


def loose_greater_or_equal(a: Any, b: Any) -> bool:
    pair = _ordered(a, b)
    return pair is not None and pair[0] >= pair[1]


def loose_compare(a: Any, b: Any) -> int:
    """Three-way loose comparison; unordered values compare as greater."""
    if loose_less(a, b):
        return -1
    if loose_equals(a, b):
        return 0
    return 1


def _collation_key(text: str) -> tuple[str, str, str]:
    decomposed = unicodedata.normalize("NFD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), decomposed.casefold(), text.swapcase()


def locale_compare(a: str, b: str) -> int:
    """Compare strings case- and accent-insensitively first.

    Ties are broken by accents, then by case with lower case first, so
    "a" < "á" < "ä" < "b" and "a" < "A" < "b".
    """
    key_a, key_b = _collation_key(a), _collation_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0
