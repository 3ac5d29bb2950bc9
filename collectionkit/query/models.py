"""Property filter queries and filtering properties.

A query is a recursive boolean expression. Its wire shape is

    {"operation": "and" | "or",
     "tokens": [{"propertyKey": ..., "operator": ..., "value": ...} | <query>]}

Tokens without a property key are free-text tokens, matched against every
property that declares the token's operator.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

import msgspec


class Operator(str, Enum):
    """Known operator symbols."""

    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="
    CONTAINS = ":"
    NOT_CONTAINS = "!:"
    EQ = "="
    NE = "!="
    STARTS_WITH = "^"
    NOT_STARTS_WITH = "!^"
    IN = "IN"

    @classmethod
    def is_known(cls, symbol: str) -> bool:
        return symbol in _KNOWN_SYMBOLS

    @staticmethod
    def is_negation(symbol: str) -> bool:
        return symbol.startswith("!")


_KNOWN_SYMBOLS = frozenset(op.value for op in Operator)

# Operators that free-text tokens may use without any property declaring them.
FREE_TEXT_OPERATORS = frozenset({Operator.CONTAINS.value, Operator.NOT_CONTAINS.value})


class Operation(str, Enum):
    """Boolean combination of a token group."""

    AND = "and"
    OR = "or"


class Token(msgspec.Struct, frozen=True, rename="camel", omit_defaults=True):
    """A single filter condition."""

    operator: str
    value: Any = None
    property_key: str | None = None

    @property
    def is_free_text(self) -> bool:
        return not self.property_key


class TokenGroup(msgspec.Struct, frozen=True):
    """A nested AND/OR combination of tokens and groups."""

    operation: str = Operation.AND.value
    tokens: tuple[Union[Token, "TokenGroup"], ...] = ()


Query = TokenGroup

EMPTY_QUERY = TokenGroup()

DATE_MATCHERS = frozenset({"date", "datetime"})

MatchFunction = Callable[[Any, Any], bool]


@dataclass(frozen=True)
class OperatorSpec:
    """An operator declared by a filtering property.

    Attributes:
        operator: Operator symbol
        match: Custom matcher (item_value, token_value) -> bool, or one of
            the typed matchers "date" / "datetime"
        token_type: "enum" makes token values lists matched by membership
    """

    operator: str
    match: MatchFunction | str | None = None
    token_type: str | None = None

    @property
    def is_custom(self) -> bool:
        return callable(self.match)

    @property
    def is_date(self) -> bool:
        return isinstance(self.match, str) and self.match in DATE_MATCHERS

    @property
    def is_enum(self) -> bool:
        return self.token_type == "enum"


@dataclass(frozen=True)
class FilteringProperty:
    """A property available to property filtering.

    Every property supports its default operator ("=" unless declared)
    in addition to the declared operators.
    """

    key: str
    operators: tuple[str | OperatorSpec, ...] = field(default_factory=tuple)
    default_operator: str = Operator.EQ.value

    def operator_map(self) -> dict[str, OperatorSpec]:
        """Map operator symbols to their specs."""
        specs: dict[str, OperatorSpec] = {
            self.default_operator: OperatorSpec(self.default_operator)
        }
        for op in self.operators:
            spec = op if isinstance(op, OperatorSpec) else OperatorSpec(str(op))
            specs[spec.operator] = spec
        return specs
