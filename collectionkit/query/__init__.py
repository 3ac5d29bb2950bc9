"""Property filter queries, operators and their evaluation."""

from .codec import decode_query, encode_query, query_from_dict, query_to_dict
from .dates import (
    DateRange,
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
from .evaluator import QueryEvaluator, evaluate, match_default
from .models import (
    EMPTY_QUERY,
    FilteringProperty,
    Operation,
    Operator,
    OperatorSpec,
    Query,
    Token,
    TokenGroup,
)

__all__ = [
    # Models
    "Token",
    "TokenGroup",
    "Query",
    "EMPTY_QUERY",
    "Operation",
    "Operator",
    "OperatorSpec",
    "FilteringProperty",
    # Evaluation
    "QueryEvaluator",
    "evaluate",
    "match_default",
    # Codec
    "encode_query",
    "decode_query",
    "query_from_dict",
    "query_to_dict",
    # Dates
    "DateRange",
    "parse_date",
    "parse_date_token",
    "match_date",
    "match_date_is_equal",
    "match_date_is_not_equal",
    "match_date_is_before",
    "match_date_is_before_or_equal",
    "match_date_is_after",
    "match_date_is_after_or_equal",
]
