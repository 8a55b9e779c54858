"""A generic relational join over in-memory records.

The join groups both sides by key into multi-maps, resolves each side's
projection against its first record, and then emits rows:

 - the cross product of left and right records sharing a key (all modes);
 - unmatched left records with an absent right side (`LeftOuter`, `FullOuter`);
 - unmatched right records with an absent left side (`RightOuter`, `FullOuter`).

Records whose key field is absent or null share a single null-key bucket, so
they match each other across sides, but never a concrete key.

Rows are emitted in first-seen key order (left buckets, then unmatched right
buckets). This order is a by-product of the grouping, and callers needing
a particular order should sort the output.

"""

import logging
from collections.abc import Iterator, Mapping, Sequence
from enum import Enum
from typing import Any, Optional, Union

from apprecon.core_engine.exceptions import InvalidJoinMode
from apprecon.core_engine.loggers import get_logger
from apprecon.core_engine.metadata.projection import (
    DEFAULT_PROJECTION,
    ProjectionInput,
    ResolvedColumn,
    parse_projection,
    resolve_projection,
)
from apprecon.core_engine.records import MISSING, get_key
from apprecon.core_engine.type_hints import FieldName, JoinKey, Record, Value

__all__ = ["JoinMode", "JoinedRow", "join"]


class JoinMode(str, Enum):
    """Which unmatched records are retained by a join."""

    LEFT_OUTER = "LeftOuter"
    """Every left record, paired with matching right records where there are any."""
    RIGHT_OUTER = "RightOuter"
    """Every right record, paired with matching left records where there are any."""
    INNER = "Inner"
    """Only pairs of left and right records sharing a key."""
    FULL_OUTER = "FullOuter"
    """Every record from both sides."""

    @property
    def keeps_unmatched_left(self) -> bool:
        """Whether left records without a match are emitted."""
        return self in (JoinMode.LEFT_OUTER, JoinMode.FULL_OUTER)

    @property
    def keeps_unmatched_right(self) -> bool:
        """Whether right records without a match are emitted."""
        return self in (JoinMode.RIGHT_OUTER, JoinMode.FULL_OUTER)

    @classmethod
    def parse(cls, value: Any) -> "JoinMode":
        """Get a join mode from a member, its name or one of its aliases
        (case-insensitive).

        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            mode = _MODE_ALIASES.get(value.replace("_", "").replace(" ", "").lower())
            if mode is not None:
                return mode
        raise InvalidJoinMode(
            f"Invalid join mode {value!r}, expected one of "
            + ", ".join(repr(member.value) for member in cls),
            mode=value,
        )


_MODE_ALIASES: dict[str, JoinMode] = {
    "leftouter": JoinMode.LEFT_OUTER,
    "left": JoinMode.LEFT_OUTER,
    "allinleft": JoinMode.LEFT_OUTER,
    "rightouter": JoinMode.RIGHT_OUTER,
    "right": JoinMode.RIGHT_OUTER,
    "allinright": JoinMode.RIGHT_OUTER,
    "inner": JoinMode.INNER,
    "onlyifinboth": JoinMode.INNER,
    "fullouter": JoinMode.FULL_OUTER,
    "full": JoinMode.FULL_OUTER,
    "outer": JoinMode.FULL_OUTER,
    "allinboth": JoinMode.FULL_OUTER,
}
"""Normalised names (lower case, no separators) for each join mode."""


class JoinedRow(Mapping[FieldName, Value]):
    """A single output row of a join.

    The row is a read-only mapping over the join's output columns (absent values
    are `MISSING`), and also keeps the source records it was built from.

    """

    __slots__ = ("_values", "left", "right")

    def __init__(
        self, values: dict[FieldName, Value], left: Optional[Record], right: Optional[Record]
    ):
        self._values = values
        self.left = left
        """The left source record, or `None` if the row has no left side."""
        self.right = right
        """The right source record, or `None` if the row has no right side."""

    @property
    def has_left(self) -> bool:
        """Whether the row has a left side."""
        return self.left is not None

    @property
    def has_right(self) -> bool:
        """Whether the row has a right side."""
        return self.right is not None

    @property
    def is_matched(self) -> bool:
        """Whether the row pairs a left record with a right record."""
        return self.has_left and self.has_right

    def __getitem__(self, key: FieldName) -> Value:
        return self._values[key]

    def __iter__(self) -> Iterator[FieldName]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"JoinedRow({self._values!r})"


def _group_by_key(records: Sequence[Record], key_field: FieldName) -> dict[JoinKey, list[Record]]:
    """Build a multi-map from key to records, preserving input order."""
    buckets: dict[JoinKey, list[Record]] = {}
    for record in records:
        buckets.setdefault(get_key(record, key_field), []).append(record)
    return buckets


def _unique_columns(columns: Sequence[ResolvedColumn]) -> list[ResolvedColumn]:
    """Drop columns whose output name is already taken, keeping the first."""
    unique: dict[FieldName, ResolvedColumn] = {}
    for column in columns:
        unique.setdefault(column.output_name, column)
    return list(unique.values())


def _output_columns(
    left_columns: Sequence[ResolvedColumn], right_columns: Sequence[ResolvedColumn]
) -> list[FieldName]:
    """Get the deduplicated output column names, left columns first."""
    names: dict[FieldName, None] = {}
    for column in (*left_columns, *right_columns):
        names.setdefault(column.output_name, None)
    return list(names)


def _build_row(
    columns: Sequence[FieldName],
    left: Optional[Record],
    right: Optional[Record],
    left_columns: Sequence[ResolvedColumn],
    right_columns: Sequence[ResolvedColumn],
) -> JoinedRow:
    """Project the present sides into a row over the output columns.

    Where a left and right column share a name, the left value is kept
    unless the row has no left side.

    """
    projected: dict[FieldName, Value] = {}
    if right is not None:
        for column in right_columns:
            projected[column.output_name] = column.value_for(right)
    if left is not None:
        for column in left_columns:
            projected[column.output_name] = column.value_for(left)

    values = {name: projected.get(name, MISSING) for name in columns}
    return JoinedRow(values, left, right)


# pylint: disable=too-many-arguments,too-many-locals
def join(
    left: Sequence[Record],
    right: Sequence[Record],
    left_key: FieldName,
    right_key: FieldName,
    left_projection: Optional[ProjectionInput] = DEFAULT_PROJECTION,
    right_projection: Optional[ProjectionInput] = DEFAULT_PROJECTION,
    mode: Union[JoinMode, str] = JoinMode.LEFT_OUTER,
    right_prefix: str = "",
    right_suffix: str = "",
    *,
    logger: Optional[logging.Logger] = None,
) -> list[JoinedRow]:
    """Join two sequences of records on a key field from each side.

    Arguments:
     - `left`, `right`: the records to join. These must be fully materialised
       and are never modified.
     - `left_key`, `right_key`: the key field on each side. Records where the
       key is absent or `None` match each other, but nothing else.
     - `left_projection`, `right_projection`: the fields to take from each side
       (see `apprecon.core_engine.metadata.projection`).
     - `mode`: the `JoinMode` (or its name), controlling which unmatched records
       are kept.
     - `right_prefix`, `right_suffix`: added to the names of plain right-side
       columns, to avoid collisions with left-side columns.

    Raises `ConfigurationError` for a malformed projection and `InvalidJoinMode`
    for an unknown mode, in both cases before any matching. Errors raised by
    computed field expressions propagate unchanged.

    """
    mode = JoinMode.parse(mode)
    left_rules = parse_projection(left_projection)
    right_rules = parse_projection(right_projection)
    logger = logger or get_logger("join")

    left = list(left)
    right = list(right)
    right_buckets = _group_by_key(right, right_key)
    left_buckets = _group_by_key(left, left_key)

    left_columns = resolve_projection(left_rules, left[0] if left else None)
    right_columns = _unique_columns(
        [
            column.renamed(right_prefix, right_suffix)
            for column in resolve_projection(right_rules, right[0] if right else None)
        ]
    )
    columns = _output_columns(left_columns, right_columns)

    def _row(left_record: Optional[Record], right_record: Optional[Record]) -> JoinedRow:
        return _build_row(columns, left_record, right_record, left_columns, right_columns)

    rows: list[JoinedRow] = []
    n_matched_keys = 0
    for key, left_records in left_buckets.items():
        right_records = right_buckets.get(key)
        if right_records:
            n_matched_keys += 1
            for left_record in left_records:
                rows.extend(_row(left_record, right_record) for right_record in right_records)
        elif mode.keeps_unmatched_left:
            rows.extend(_row(left_record, None) for left_record in left_records)

    if mode.keeps_unmatched_right:
        for key, right_records in right_buckets.items():
            if key not in left_buckets:
                rows.extend(_row(None, right_record) for right_record in right_records)

    logger.debug(
        "%s join of %d left records (%d keys) and %d right records (%d keys): "
        + "%d matched keys, %d rows",
        mode.value,
        len(left),
        len(left_buckets),
        len(right),
        len(right_buckets),
        n_matched_keys,
        len(rows),
    )
    return rows
