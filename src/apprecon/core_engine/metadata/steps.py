"""Metadata classes for join steps."""

import logging
from collections.abc import Sequence
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from apprecon.core_engine.join import JoinedRow, JoinMode, join
from apprecon.core_engine.metadata.projection import DEFAULT_PROJECTION, parse_projection
from apprecon.core_engine.type_hints import FieldName, Record

__all__ = ["JoinStep"]


class JoinStep(BaseModel):
    """A join configuration. This joins the `right` records onto the `left` records.

    Projections are kept as provided (strings, mappings or rule objects) and
    parsed when the step is applied, so that a malformed computed field is
    reported as a `ConfigurationError` rather than a validation error.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Optional[str] = None
    """An ID for the step."""
    description: Optional[str] = None
    """An optional description for the step."""
    left_key: FieldName
    """The key field of the left records."""
    right_key: Optional[FieldName] = None
    """The key field of the right records. Defaults to `left_key`."""
    left_projection: Any = DEFAULT_PROJECTION
    """The fields to take from the left records."""
    right_projection: Any = DEFAULT_PROJECTION
    """The fields to take from the right records."""
    mode: JoinMode = JoinMode.LEFT_OUTER
    """The join mode. Legacy names (e.g. 'AllInBoth') are accepted."""
    right_prefix: str = ""
    """A prefix for the names of plain right-side columns."""
    right_suffix: str = ""
    """A suffix for the names of plain right-side columns."""

    @field_validator("mode", mode="before")
    @classmethod
    def _normalise_mode(cls, value: Any) -> Any:
        """Map mode names and aliases onto the enum values."""
        if isinstance(value, str):
            try:
                return JoinMode.parse(value)
            except ValueError:
                return value  # Let pydantic report the enum error.
        return value

    @model_validator(mode="after")
    def _default_right_key(self) -> "JoinStep":
        """Use the left key for the right side if none is given."""
        if self.right_key is None:
            object.__setattr__(self, "right_key", self.left_key)
        return self

    def __str__(self):  # pydantic's default __str__ strips the model name.
        return super().__repr__()

    def check(self) -> "JoinStep":
        """Parse both projections, raising a `ConfigurationError` if either is malformed."""
        parse_projection(self.left_projection)
        parse_projection(self.right_projection)
        return self

    def apply(
        self,
        left: Sequence[Record],
        right: Sequence[Record],
        logger: Optional[logging.Logger] = None,
    ) -> list[JoinedRow]:
        """Join `right` onto `left` according to the step."""
        return join(
            left,
            right,
            left_key=self.left_key,
            right_key=self.right_key or self.left_key,
            left_projection=self.left_projection,
            right_projection=self.right_projection,
            mode=self.mode,
            right_prefix=self.right_prefix,
            right_suffix=self.right_suffix,
            logger=logger,
        )
