"""Field projection rules for the join engine.

A projection is a sequence of rules, each of which selects (or computes)
output fields from a source record:

 - a literal field name (`"Name"`), which always produces one column;
 - a wildcard pattern (`"*"`, `"Folder*"`), which expands to every matching
   field of a representative record;
 - a computed field (`{"name": "Upper", "expression": lambda r: ...}`), which
   derives one column from each record.

Rules are parsed and checked before any matching happens, and resolved once
per side against that side's first record.

"""

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict

from apprecon.core_engine.exceptions import ConfigurationError
from apprecon.core_engine.records import field_names, get_field
from apprecon.core_engine.templating import compile_expression, render_expression
from apprecon.core_engine.type_hints import Expression, FieldName, Pattern, Record, Value

__all__ = [
    "ComputedField",
    "DEFAULT_PROJECTION",
    "FieldRule",
    "ProjectionInput",
    "ProjectionRule",
    "ResolvedColumn",
    "WildcardRule",
    "parse_projection",
    "parse_rule",
    "resolve_projection",
]

WILDCARD_CHARACTERS = re.compile(r"[*?\[]")
"""Characters which make a field name string a wildcard pattern."""
NAME_KEYS = frozenset({"name", "n", "label", "l"})
"""Accepted (case-insensitive) keys for the output name of a computed field mapping."""
EXPRESSION_KEYS = frozenset({"expression", "e"})
"""Accepted (case-insensitive) keys for the derivation of a computed field mapping."""
DEFAULT_PROJECTION = "*"
"""The default projection, selecting every field of the representative record."""


class _Rule(BaseModel):
    """Base for projection rules."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class FieldRule(_Rule):
    """Select a single field by name."""

    name: FieldName
    """The name of the field to select."""


class WildcardRule(_Rule):
    """Select every field of the representative record matching a pattern."""

    pattern: Pattern
    """A case-sensitive, shell-style pattern (`*`, `?`, `[seq]`)."""

    def expand(self, representative: Optional[Record]) -> list[FieldName]:
        """Get the matching field names from a representative record."""
        return [
            name
            for name in field_names(representative)
            if isinstance(name, str) and fnmatchcase(name, self.pattern)
        ]


class ComputedField(_Rule):
    """Derive an output field from a source record.

    Both the name and the expression are optional here so that a partially
    specified rule can be reported as a `ConfigurationError` (see `check`)
    instead of as a model validation error.

    """

    name: Optional[FieldName] = None
    """The name of the output field."""
    expression: Optional[Expression] = None
    """A callable taking the record, or a jinja2 template over its fields."""

    def check(self) -> "ComputedField":
        """Ensure the rule has an output name and a usable derivation."""
        if not self.name:
            raise ConfigurationError(f"Computed field {self!r} has no output name")
        if self.expression is None:
            raise ConfigurationError(f"Computed field {self.name!r} has no expression")
        if isinstance(self.expression, str):
            compile_expression(self.expression)
        elif not callable(self.expression):
            raise ConfigurationError(
                f"Expression for computed field {self.name!r} must be callable or a template"
            )
        return self

    def derive(self, record: Record) -> Value:
        """Compute the field's value for a record. Errors raised by a callable
        expression are not caught.

        """
        if isinstance(self.expression, str):
            return render_expression(self.expression, record)
        return self.expression(record)  # type: ignore


ProjectionRule = Union[FieldRule, WildcardRule, ComputedField]
"""A parsed projection rule."""
ProjectionInput = Union[
    str, ProjectionRule, Mapping[str, Any], Sequence[Union[str, ProjectionRule, Mapping[str, Any]]]
]
"""Anything that `parse_projection` accepts."""


def _computed_field_from_mapping(mapping: Mapping[str, Any]) -> ComputedField:
    """Build a computed field from a mapping with name and expression keys."""
    name: Optional[str] = None
    expression: Any = None
    for key, value in mapping.items():
        lowered = str(key).lower()
        if lowered in NAME_KEYS:
            name = value
        elif lowered in EXPRESSION_KEYS:
            expression = value
        else:
            raise ConfigurationError(f"Unexpected key {key!r} in computed field {dict(mapping)!r}")

    if name is not None and not isinstance(name, str):
        raise ConfigurationError(f"Computed field name must be a string, got {name!r}")
    if expression is not None and not (callable(expression) or isinstance(expression, str)):
        raise ConfigurationError(
            f"Expression for computed field {name!r} must be callable or a template"
        )
    return ComputedField(name=name, expression=expression)


def parse_rule(rule: Any) -> ProjectionRule:
    """Parse a single projection rule."""
    if isinstance(rule, ComputedField):
        return rule.check()
    if isinstance(rule, (FieldRule, WildcardRule)):
        return rule
    if isinstance(rule, str):
        if not rule:
            raise ConfigurationError("Field names in a projection must not be empty")
        if WILDCARD_CHARACTERS.search(rule):
            return WildcardRule(pattern=rule)
        return FieldRule(name=rule)
    if isinstance(rule, Mapping):
        return _computed_field_from_mapping(rule).check()
    raise ConfigurationError(f"Unsupported projection rule {rule!r}")


def parse_projection(rules: Optional[ProjectionInput] = DEFAULT_PROJECTION) -> list[ProjectionRule]:
    """Parse a projection (a single rule or a sequence of rules) into rules.

    `None` selects every field.

    """
    if rules is None:
        rules = DEFAULT_PROJECTION
    if isinstance(rules, (str, Mapping, FieldRule, WildcardRule, ComputedField)):
        return [parse_rule(rules)]
    if isinstance(rules, Iterable):
        return [parse_rule(rule) for rule in rules]
    raise ConfigurationError(f"Unsupported projection {rules!r}")


@dataclass(frozen=True)
class ResolvedColumn:
    """A projection rule resolved to a single output column."""

    output_name: FieldName
    """The name of the column in the joined row."""
    source_field: Optional[FieldName] = None
    """The field read from the source record, for plain (non-computed) columns."""
    computed: Optional[ComputedField] = None
    """The computed field rule, for computed columns."""

    @property
    def is_computed(self) -> bool:
        """Whether the column is derived by a computed field rule."""
        return self.computed is not None

    def renamed(self, prefix: str = "", suffix: str = "") -> "ResolvedColumn":
        """Apply a prefix and suffix to the output name of plain columns.
        Computed columns keep the name they were given.

        """
        if self.is_computed or not (prefix or suffix):
            return self
        return ResolvedColumn(
            output_name=f"{prefix}{self.output_name}{suffix}",
            source_field=self.source_field,
        )

    def value_for(self, record: Record) -> Value:
        """Project the column's value from a (present) source record."""
        if self.computed is not None:
            return self.computed.derive(record)
        return get_field(record, self.source_field)  # type: ignore


def resolve_projection(
    rules: Sequence[ProjectionRule], representative: Optional[Record]
) -> list[ResolvedColumn]:
    """Resolve rules to output columns against a representative record.

    Duplicate output names are dropped, keeping the first occurrence.

    """
    columns: list[ResolvedColumn] = []
    seen: set[FieldName] = set()

    def _add(column: ResolvedColumn):
        if column.output_name not in seen:
            seen.add(column.output_name)
            columns.append(column)

    for rule in rules:
        if isinstance(rule, ComputedField):
            _add(ResolvedColumn(output_name=rule.name, computed=rule))  # type: ignore
        elif isinstance(rule, WildcardRule):
            for name in rule.expand(representative):
                _add(ResolvedColumn(output_name=name, source_field=name))
        else:
            _add(ResolvedColumn(output_name=rule.name, source_field=rule.name))
    return columns
