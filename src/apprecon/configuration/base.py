"""The base configuration format."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, TypeVar

from pydantic import BaseModel

from apprecon.core_engine.metadata.steps import JoinStep
from apprecon.core_engine.type_hints import Location

CSelf = TypeVar("CSelf", bound="BaseReconcilerConfig")
"""The type of the config."""


class BaseReconcilerConfig(BaseModel, ABC):
    """The base reconciler configuration."""

    location: Optional[Path] = None
    """
    The location of the config file, if loaded from one. Relative locations
    within the config are resolved against its parent directory.

    """

    @abstractmethod
    def get_join_step(self) -> JoinStep:
        """Get the join step used to merge the two farms' applications."""

    def resolve_path(self, path: Location) -> Path:
        """Resolve a path from the config relative to the config file."""
        path = Path(path)
        if path.is_absolute() or self.location is None:
            return path
        return self.location.parent.joinpath(path)

    @classmethod
    def load(cls: type[CSelf], location: Location) -> CSelf:
        """Load an instance of the config from a JSON file."""
        location = Path(location)
        with location.open("r", encoding="utf-8") as config_stream:
            json_config = json.load(config_stream)

        if not isinstance(json_config, dict):
            raise TypeError("JSON reconciler config must contain mapping in root")

        return cls(location=location, **json_config)
