"""Field access for open-ended records.

Records are plain mappings. Lookups never fail: an absent field is returned as
the `MISSING` sentinel, so callers can tell an absent field apart from a field
explicitly set to `None`.

"""

from collections.abc import Mapping, Set
from typing import Any, Optional

from apprecon.core_engine.type_hints import FieldName, JoinKey, Record, Value

__all__ = [
    "MISSING",
    "NULL_KEY",
    "field_names",
    "get_field",
    "get_key",
    "is_missing",
]


class _MissingType:
    """The type of the `MISSING` sentinel. There is only ever one instance."""

    _instance: Optional["_MissingType"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<MISSING>"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_MissingType, ())


MISSING: Any = _MissingType()
"""The value of a field which is absent from a record."""


class _NullKeyType:
    """The type of the reserved null-key bucket."""

    def __repr__(self) -> str:
        return "<NULL_KEY>"


NULL_KEY: JoinKey = _NullKeyType()
"""
The join key shared by every record whose key field is absent or `None`.
This compares equal only to itself, never to a concrete key value.

"""


def is_missing(value: Value) -> bool:
    """Whether a value is the `MISSING` sentinel."""
    return value is MISSING


def get_field(record: Optional[Record], field: FieldName) -> Value:
    """Get a field from a record, returning `MISSING` if the field (or the
    record itself) is absent.

    """
    if record is None:
        return MISSING
    return record.get(field, MISSING)


def _freeze(value: Value) -> JoinKey:
    """Convert a value to a hashable equivalent which compares by equality.

    Containers are tagged with their kind, so a list never matches a tuple
    or a mapping its sequence of items.

    """
    if isinstance(value, Mapping):
        return ("mapping", frozenset((key, _freeze(item)) for key, item in value.items()))
    if isinstance(value, Set):
        return ("set", frozenset(map(_freeze, value)))
    if isinstance(value, list):
        return ("list", tuple(map(_freeze, value)))
    if isinstance(value, tuple):
        return ("tuple", tuple(map(_freeze, value)))
    return value


def get_key(record: Optional[Record], field: FieldName) -> JoinKey:
    """Get the join key for a record from its key field.

    Absent and `None` values are funnelled into the `NULL_KEY` bucket.

    """
    value = get_field(record, field)
    if value is MISSING or value is None:
        return NULL_KEY
    return _freeze(value)


def field_names(record: Optional[Record]) -> list[FieldName]:
    """Get the field names of a representative record, in order."""
    if record is None:
        return []
    return list(record.keys())
