"""Fixtures for query tests."""

from datetime import datetime

import pytest

from collectionkit.core.diagnostics import Diagnostics
from collectionkit.query import FilteringProperty, OperatorSpec, QueryEvaluator

ALL_OPERATORS = (":", "!:", "=", "!=", "<", "<=", ">", ">=")



@pytest.fixture
def filtering_properties():
    return (
        FilteringProperty(key="id", operators=(":", "!:")),
        FilteringProperty(key="field", operators=(":", "!:")),
        FilteringProperty(key="anotherField", operators=(":",)),
        FilteringProperty(key="number", operators=(*ALL_OPERATORS, "^", "!^")),
        FilteringProperty(key="default"),
        FilteringProperty(key="falsy", operators=ALL_OPERATORS),
        FilteringProperty(key="bool", operators=ALL_OPERATORS),
    )


@pytest.fixture
def diagnostics():
    return Diagnostics(enabled=True)


@pytest.fixture
def evaluator(filtering_properties, diagnostics):
    return QueryEvaluator(filtering_properties, diagnostics)


@pytest.fixture
def date_properties():
    operators = ("=", "!=", "<", "<=", ">", ">=", "IN", ":")
    return (
        FilteringProperty(
            key="date",
            operators=tuple(OperatorSpec(op, match="date") for op in operators),
        ),
        FilteringProperty(
            key="dateTime",
            operators=tuple(OperatorSpec(op, match="datetime") for op in operators),
        ),
    )


@pytest.fixture
def now():
    return datetime(2024, 5, 10, 12, 0, 0)


@pytest.fixture
def date_evaluator(date_properties, diagnostics, now):
    return QueryEvaluator(date_properties, diagnostics, now=lambda: now)
