"""Type aliases for the core engine."""

from collections.abc import Callable, Hashable, Mapping
from pathlib import Path
from typing import Any, Union

from typing_extensions import Literal, get_args

FieldName = str
"""The name of a field within a record."""
Value = Any
"""The value contained in a specific field."""
Record = Mapping[FieldName, Value]
"""
A record from a farm (or any other source). The field set is open, records
from the same source share a field set by convention only.

"""
MutableRecord = dict[FieldName, Value]
"""A record being built up by a component."""
Records = list[Record]
"""A fully materialised sequence of records."""

JoinKey = Hashable
"""A (hashable) value extracted from a record's key field."""
Derivation = Callable[[Record], Value]
"""A function deriving a computed field from a single record."""
Template = str
"""A jinja2 template, rendered with a record's fields as variables."""
Expression = Union[Derivation, Template]
"""The expression for a computed field: a callable or a template."""
Pattern = str
"""A shell-style wildcard pattern over field names."""

ApplicationName = str
"""The name of a published application."""
FarmName = str
"""A human-readable name for a farm (e.g. 'old', 'new')."""
FarmType = str
"""The registered name of a farm client implementation."""

PathStr = str
"""A filesystem path, as a string."""
Location = Union[PathStr, Path]
"""A local filesystem location."""

JoinModeName = str
"""The name of a join mode, as it appears in configuration."""

Action = Literal["enable_old", "disable_old", "enable_new", "disable_new", "create_new"]
"""An administrative action which can be taken for a reconciled row."""
ALL_ACTIONS: tuple[Action, ...] = get_args(Action)
"""All supported actions, in display order."""
RowStatus = Literal["old_only", "new_only", "both"]
"""Where the application for a reconciled row is published."""
