"""Query serialization.

Queries round-trip through their JSON wire shape so callers can persist
them, for example in a URL. `query_from_dict` is strict and raises
QueryDecodeError; `decode_query` is lenient and returns a default for
anything it cannot read.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import msgspec

from collectionkit.core.exceptions import QueryDecodeError
from collectionkit.query.models import Operation, Token, TokenGroup

_OPERATIONS = frozenset(op.value for op in Operation)


def _token_from_dict(data: Mapping[str, Any], path: str) -> Token:
    try:
        return msgspec.convert(dict(data), Token)
    except msgspec.ValidationError as e:
        raise QueryDecodeError(str(e), path) from e


def query_from_dict(data: Any, path: str = "query") -> TokenGroup:
    """Build a query from its wire shape.

    Accepts the legacy "tokenGroups" key in place of "tokens".

    Raises:
        QueryDecodeError: If the data is not a valid query
    """
    if not isinstance(data, Mapping):
        raise QueryDecodeError("expected an object", path)

    operation = data.get("operation", Operation.AND.value)
    if operation not in _OPERATIONS:
        raise QueryDecodeError(f"unknown operation {operation!r}", path)

    raw_tokens = data.get("tokenGroups")
    if raw_tokens is None:
        raw_tokens = data.get("tokens", [])
    if not isinstance(raw_tokens, (list, tuple)):
        raise QueryDecodeError("tokens must be a list", path)

    tokens: list[Token | TokenGroup] = []
    for index, raw in enumerate(raw_tokens):
        child_path = f"{path}.tokens[{index}]"
        if isinstance(raw, Mapping) and "operation" in raw:
            tokens.append(query_from_dict(raw, child_path))
        elif isinstance(raw, Mapping):
            tokens.append(_token_from_dict(raw, child_path))
        else:
            raise QueryDecodeError("expected a token or a token group", child_path)
    return TokenGroup(operation=operation, tokens=tuple(tokens))


def query_to_dict(query: TokenGroup) -> dict[str, Any]:
    """Convert a query to its wire shape, with token lists as lists."""
    return msgspec.json.decode(msgspec.json.encode(query))


def encode_query(query: TokenGroup) -> str:
    """Encode a query as JSON."""
    return msgspec.json.encode(query).decode()


def decode_query(text: str | bytes, default: TokenGroup | None = None) -> TokenGroup | None:
    """Decode a JSON query, returning `default` if it is invalid."""
    try:
        return query_from_dict(msgspec.json.decode(text))
    except (msgspec.DecodeError, QueryDecodeError):
        return default
