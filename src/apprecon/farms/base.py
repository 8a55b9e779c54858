"""An abstract client for a farm's application administration API."""

import logging
from abc import ABCMeta, abstractmethod
from typing import Optional

from apprecon.core_engine.loggers import get_logger
from apprecon.core_engine.type_hints import ApplicationName, FarmName, FieldName, Record, Records

DEFAULT_NAME_FIELD: FieldName = "Name"
"""The field holding an application's name."""
DEFAULT_ENABLED_FIELD: FieldName = "Enabled"
"""The field holding an application's enabled flag."""


class BaseFarmClient(metaclass=ABCMeta):
    """An abstract client for the published applications of a single farm.

    Implementations return snapshots from `list_applications`: callers may
    hold on to the records, and later changes to the farm must not be
    visible through them.

    """

    def __init__(
        self,
        name: FarmName,
        *,
        name_field: FieldName = DEFAULT_NAME_FIELD,
        enabled_field: FieldName = DEFAULT_ENABLED_FIELD,
        logger: Optional[logging.Logger] = None,
    ):
        self.name = name
        """A human-readable name for the farm."""
        self.name_field = name_field
        """The field holding an application's name."""
        self.enabled_field = enabled_field
        """The field holding an application's enabled flag."""
        self.logger = logger or get_logger(type(self).__name__)
        """The `logging.Logger` instance for the client."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    @abstractmethod
    def list_applications(self) -> Records:
        """Get a snapshot of the farm's published applications."""

    @abstractmethod
    def set_application_enabled(self, application: ApplicationName, enabled: bool) -> None:
        """Enable or disable an application.

        Raises `ApplicationNotFound` if the application doesn't exist.

        """

    @abstractmethod
    def create_application(self, record: Record) -> None:
        """Publish a new application from a record.

        Raises `ApplicationExists` if an application with the same name exists.

        """

    def enable_application(self, application: ApplicationName) -> None:
        """Enable an application."""
        self.set_application_enabled(application, True)

    def disable_application(self, application: ApplicationName) -> None:
        """Disable an application."""
        self.set_application_enabled(application, False)
