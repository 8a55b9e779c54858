"""Construction of farm clients from configuration, dispatching on the farm type."""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from apprecon.core_engine.exceptions import ConfigurationError
from apprecon.core_engine.type_hints import FarmType
from apprecon.farms.base import BaseFarmClient
from apprecon.farms.file import JSONFileFarmClient
from apprecon.farms.memory import InMemoryFarmClient

if TYPE_CHECKING:  # pragma: no cover
    from apprecon.configuration.models import FarmConfig

_FARM_CLIENT_TYPES: dict[FarmType, type[BaseFarmClient]] = {
    "memory": InMemoryFarmClient,
    "json": JSONFileFarmClient,
}
"""Supported farm client implementations, by type name."""


def add_farm_client_type(type_name: FarmType, client_type: type[BaseFarmClient]):
    """Register a new farm client implementation.

    Clients are constructed with the farm name as their first argument and
    the `options` from the farm config as keyword arguments (plus `location`
    if one is set).

    """
    if not (isinstance(client_type, type) and issubclass(client_type, BaseFarmClient)):
        raise TypeError("Farm client type must be a `BaseFarmClient` subclass")
    _FARM_CLIENT_TYPES[type_name] = client_type


def is_supported(type_name: FarmType) -> bool:
    """Whether a farm type has a registered client."""
    return type_name in _FARM_CLIENT_TYPES


def get_farm_client(
    config: "FarmConfig", logger: Optional[logging.Logger] = None
) -> BaseFarmClient:
    """Build a farm client from its configuration."""
    try:
        client_type = _FARM_CLIENT_TYPES[config.type]
    except KeyError as err:
        raise ConfigurationError(
            f"Unsupported farm type {config.type!r} for farm {config.name!r}, expected one of "
            + ", ".join(map(repr, sorted(_FARM_CLIENT_TYPES)))
        ) from err

    kwargs = dict(config.options)
    kwargs["name_field"] = config.name_field
    kwargs["enabled_field"] = config.enabled_field
    if logger is not None:
        kwargs["logger"] = logger

    if issubclass(client_type, JSONFileFarmClient):
        if config.location is None:
            raise ConfigurationError(f"Farm {config.name!r} of type 'json' needs a location")
        return client_type(config.name, Path(config.location), **kwargs)
    if issubclass(client_type, InMemoryFarmClient):
        if config.location is not None:
            raise ConfigurationError(
                f"Farm {config.name!r} of type {config.type!r} is held in memory and "
                + "doesn't take a location"
            )
        return client_type(config.name, config.applications, **kwargs)
    if config.location is not None:
        kwargs["location"] = config.location
    return client_type(config.name, **kwargs)
