"""Item identity.

Items are opaque caller records. Whenever identity matters (selection,
expansion, deduplication) the engine works with an item key derived by a
TrackBy projection instead of the item itself.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping
from typing import Any

TrackBy = str | Callable[[Any], Hashable] | None


class IdentityKey:
    """Key that hashes and compares by object identity.

    Used when no TrackBy is given, so two structurally equal but distinct
    items remain distinct selection subjects. Holding the item keeps its
    id() from being reused while the key is alive.
    """

    __slots__ = ("item",)

    def __init__(self, item: Any):
        self.item = item

    def __hash__(self) -> int:
        return id(self.item)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, IdentityKey) and other.item is self.item

    def __repr__(self) -> str:
        return f"IdentityKey({self.item!r})"


def get_item_value(item: Any, key: str) -> Any:
    """Read a field from a mapping or an object attribute.

    Args:
        item: Item record
        key: Field name

    Returns:
        Field value or None when the field is missing
    """
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def get_item_fields(item: Any) -> list[str]:
    """List the field names of an item."""
    if isinstance(item, Mapping):
        return [str(key) for key in item.keys()]
    fields = getattr(item, "__struct_fields__", None)
    if fields is not None:
        return list(fields)
    if hasattr(item, "__dict__"):
        return [key for key in vars(item) if not key.startswith("_")]
    return []


def get_trackable_value(track_by: TrackBy, item: Any) -> Hashable:
    """Compute the key identifying an item.

    Args:
        track_by: Field name, key function, or None for identity
        item: Item record

    Returns:
        Hashable item key
    """
    if track_by is None:
        return IdentityKey(item)
    if callable(track_by):
        return track_by(item)
    return get_item_value(item, track_by)
