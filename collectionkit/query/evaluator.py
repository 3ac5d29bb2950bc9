"""Property filter query evaluation.

The evaluator applies a recursive AND/OR query to one item at a time,
using the operators each filtering property declares. Operators match in
one of four ways:

1. custom match function: called with the raw item value
2. typed date match ("date" / "datetime"): interval comparison
3. enum token type: membership of the item value in the token list
4. default: loose comparison of normalized values

Unsupported configuration raises ConfigurationError. Data-shape
anomalies (an operator a typed matcher cannot apply, a non-list enum
token) warn once through the injected Diagnostics and do not match.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Any

from collectionkit.core.diagnostics import Diagnostics
from collectionkit.core.exceptions import ConfigurationError, UnsupportedOperatorError
from collectionkit.core.trackby import get_item_value
from collectionkit.core.values import (
    fixup_falsy_values,
    loose_equals,
    loose_greater,
    loose_greater_or_equal,
    loose_less,
    loose_less_or_equal,
    to_text,
)
from collectionkit.query.dates import DATE_OPERATORS, match_date
from collectionkit.query.models import (
    EMPTY_QUERY,
    FREE_TEXT_OPERATORS,
    FilteringProperty,
    Operation,
    Operator,
    OperatorSpec,
    Token,
    TokenGroup,
)

logger = logging.getLogger(__name__)


def match_default(item_value: Any, token_value: Any, operator: str) -> bool:
    """Match normalized values with the default operator semantics."""
    match operator:
        case "<":
            return loose_less(item_value, token_value)
        case "<=":
            return loose_less_or_equal(item_value, token_value)
        case ">":
            return loose_greater(item_value, token_value)
        case ">=":
            return loose_greater_or_equal(item_value, token_value)
        case "=":
            return loose_equals(item_value, token_value)
        case "!=":
            return not loose_equals(item_value, token_value)
        case ":":
            return to_text(token_value).lower() in to_text(item_value).lower()
        case "!:":
            return to_text(token_value).lower() not in to_text(item_value).lower()
        case "^":
            return to_text(item_value).lower().startswith(to_text(token_value).lower())
        case "!^":
            return not to_text(item_value).lower().startswith(
                to_text(token_value).lower()
            )
        case _:
            raise UnsupportedOperatorError(operator)


def _contains(values: Sequence[Any], item_value: Any) -> bool:
    return any(value is item_value or value == item_value for value in values)


class QueryEvaluator:
    """Evaluate property filter queries against items."""

    def __init__(
        self,
        properties: Iterable[FilteringProperty],
        diagnostics: Diagnostics | None = None,
        now: Callable[[], datetime] | None = None,
    ):
        """Initialize the evaluator.

        Args:
            properties: Filtering properties with their operators
            diagnostics: Receiver of one-time warnings
            now: Clock used for relative date ranges

        Raises:
            ConfigurationError: If an operator declares an unsupported match
        """
        self.diagnostics = (
            diagnostics if diagnostics is not None else Diagnostics(logger)
        )
        self.now = now or datetime.now
        self.properties: dict[str, dict[str, OperatorSpec]] = {}
        for prop in properties:
            operators = prop.operator_map()
            for spec in operators.values():
                self._validate(prop.key, spec)
            self.properties[prop.key] = operators

    @staticmethod
    def _validate(property_key: str, spec: OperatorSpec) -> None:
        if spec.match is not None and not (spec.is_custom or spec.is_date):
            raise ConfigurationError(
                f"Unsupported `operator.match` type given: {spec.match!r}",
                property_key=property_key,
            )

    def evaluate(self, item: Any, query: TokenGroup | Token | None) -> bool:
        """Check whether an item satisfies a query."""
        return self._evaluate(item, EMPTY_QUERY if query is None else query)

    def create_predicate(self, query: TokenGroup | None) -> Callable[[Any], bool]:
        query = EMPTY_QUERY if query is None else query
        return lambda item: self._evaluate(item, query)

    def filter(self, items: Iterable[Any], query: TokenGroup | None) -> list[Any]:
        predicate = self.create_predicate(query)
        return [item for item in items if predicate(item)]

    def _evaluate(self, item: Any, node: TokenGroup | Token) -> bool:
        if isinstance(node, Token):
            return self._evaluate_token(item, node)

        if node.operation == Operation.AND.value:
            return all(self._evaluate(item, child) for child in node.tokens)
        if node.operation == Operation.OR.value:
            return any(self._evaluate(item, child) for child in node.tokens)
        raise ConfigurationError(f"Unsupported query operation: {node.operation!r}")

    def _evaluate_token(self, item: Any, token: Token) -> bool:
        if token.property_key:
            operators = self.properties.get(token.property_key)
            # Unknown property or undeclared operator: the property is not searched.
            if operators is None or token.operator not in operators:
                return False
            spec = operators[token.operator]
            return self._match(
                get_item_value(item, token.property_key),
                token.value,
                spec,
                token.property_key,
            )
        return self._evaluate_free_text(item, token)

    def _evaluate_free_text(self, item: Any, token: Token) -> bool:
        declared = [
            (key, operators[token.operator])
            for key, operators in self.properties.items()
            if token.operator in operators
        ]
        if not declared and token.operator not in FREE_TEXT_OPERATORS:
            raise UnsupportedOperatorError(token.operator)

        # A negated operator matches when no property matches the positive
        # form, so properties that do not declare it count as matching.
        if Operator.is_negation(token.operator):
            return all(
                self._match(get_item_value(item, key), token.value, spec, key)
                for key, spec in declared
            )
        return any(
            self._match(get_item_value(item, key), token.value, spec, key)
            for key, spec in declared
        )

    def _match(
        self, raw_value: Any, token_value: Any, spec: OperatorSpec, property_key: str
    ) -> bool:
        operator = spec.operator

        if spec.is_custom:
            assert callable(spec.match)
            return bool(spec.match(raw_value, token_value))

        if spec.is_date:
            if operator not in DATE_OPERATORS:
                self.diagnostics.warn_once(
                    f"Unsupported operator {operator!r} given for match type "
                    f"{spec.match!r} on property {property_key!r}."
                )
                return False
            return match_date(
                raw_value,
                token_value,
                operator,
                granularity=str(spec.match),
                now=self.now(),
            )

        item_value = fixup_falsy_values(raw_value)
        if spec.is_enum:
            if not isinstance(token_value, (list, tuple)):
                self.diagnostics.warn_once(
                    f"Expected an array token value for enum property "
                    f"{property_key!r} and operator {operator!r}."
                )
                return False
            if operator == Operator.EQ.value:
                return _contains(token_value, item_value)
            if operator == Operator.NE.value:
                return not _contains(token_value, item_value)

        return match_default(item_value, token_value, operator)


def evaluate(
    item: Any,
    query: TokenGroup | None,
    properties: Iterable[FilteringProperty],
    diagnostics: Diagnostics | None = None,
) -> bool:
    """Evaluate a query against a single item."""
    return QueryEvaluator(properties, diagnostics).evaluate(item, query)
