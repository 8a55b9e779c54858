"""The JSON configuration for reconciling two farms."""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from apprecon.configuration.base import BaseReconcilerConfig
from apprecon.core_engine.join import JoinMode
from apprecon.core_engine.metadata.steps import JoinStep
from apprecon.core_engine.type_hints import FarmName, FarmType, FieldName, PathStr, Record
from apprecon.farms.base import DEFAULT_ENABLED_FIELD, DEFAULT_NAME_FIELD

DEFAULT_RIGHT_SUFFIX = "_New"
"""The suffix added to the new farm's columns in the merged table."""


def default_join_step() -> JoinStep:
    """The join used when none is configured: every application from both farms."""
    return JoinStep(
        id="applications",
        left_key=DEFAULT_NAME_FIELD,
        mode=JoinMode.FULL_OUTER,
        right_suffix=DEFAULT_RIGHT_SUFFIX,
    )


class FarmConfig(BaseModel):
    """Configuration for connecting to a single farm."""

    name: FarmName
    """A human-readable name for the farm."""
    type: FarmType = "memory"
    """The registered farm client type (e.g. 'memory' or 'json')."""
    location: Optional[PathStr] = None
    """The location of the farm's data, for file-backed clients."""
    applications: list[Record] = Field(default_factory=list)
    """Seed application records for in-memory farms."""
    name_field: FieldName = DEFAULT_NAME_FIELD
    """The field holding an application's name."""
    enabled_field: FieldName = DEFAULT_ENABLED_FIELD
    """The field holding an application's enabled flag."""
    options: dict[str, Any] = Field(default_factory=dict)
    """Extra keyword arguments for the farm client."""


class ActionSettings(BaseModel):
    """Options for actions taken against the farms."""

    created_enabled: bool = False
    """
    Whether applications created in the new farm start enabled. By default they
    start disabled, so they can be checked before users see them.

    """
    copy_fields: Optional[list[FieldName]] = None
    """
    The fields copied from the old farm's application when creating it in the
    new farm. All fields are copied if this is not set.

    """


class ReconcilerConfig(BaseReconcilerConfig):
    """Configuration for reconciling the applications of an old and a new farm."""

    old_farm: FarmConfig
    """The farm being migrated from. Its applications form the left side of the join."""
    new_farm: FarmConfig
    """The farm being migrated to. Its applications form the right side of the join."""
    join: JoinStep = Field(default_factory=default_join_step)
    """The join used to merge the applications of the two farms."""
    sort_field: Optional[FieldName] = None
    """The field to sort merged rows by. Defaults to the join key."""
    enabled_field: Optional[FieldName] = None
    """
    The field holding an application's enabled flag in both farms, overriding
    each farm's `enabled_field`.

    """
    actions: ActionSettings = Field(default_factory=ActionSettings)
    """Options for actions taken against the farms."""
    log_level: Optional[Union[int, str]] = None
    """An optional level for the package logger."""

    @field_validator("join", mode="before")
    @classmethod
    def _default_join_key(cls, value: Any) -> Any:
        """Fill in the default key and mode for partially configured joins."""
        if isinstance(value, dict):
            value = {"left_key": DEFAULT_NAME_FIELD, "mode": JoinMode.FULL_OUTER, **value}
        return value

    @model_validator(mode="after")
    def _resolve_farm_locations(self) -> "ReconcilerConfig":
        """Resolve farm locations relative to the config file."""
        for farm in (self.old_farm, self.new_farm):
            if farm.location is not None:
                farm.location = str(self.resolve_path(farm.location))
        return self

    def get_join_step(self) -> JoinStep:
        return self.join

    def get_sort_field(self) -> FieldName:
        """Get the field that merged rows are sorted by."""
        return self.sort_field or self.join.left_key
