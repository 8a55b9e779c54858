"""A farm client holding its applications in memory."""

import copy
from collections.abc import Iterable
from typing import Any, Optional

from apprecon.core_engine.exceptions import (
    ApplicationExists,
    ApplicationNotFound,
    FarmOperationError,
)
from apprecon.core_engine.records import MISSING, get_field
from apprecon.core_engine.type_hints import ApplicationName, FarmName, MutableRecord, Record, Records
from apprecon.farms.base import BaseFarmClient


class InMemoryFarmClient(BaseFarmClient):
    """A farm whose applications live in a dictionary, keyed by name.

    Useful for tests, and as the base for clients which load a full
    snapshot of a farm up front.

    """

    def __init__(
        self, name: FarmName, applications: Optional[Iterable[Record]] = None, **kwargs: Any
    ):
        super().__init__(name, **kwargs)
        self._applications: dict[ApplicationName, MutableRecord] = {}
        for record in applications or ():
            self._add(record)

    def _get_name(self, record: Record) -> ApplicationName:
        """Get the name of an application from its record."""
        app_name = get_field(record, self.name_field)
        if app_name is MISSING or app_name is None or app_name == "":
            raise FarmOperationError(
                f"Application record has no {self.name_field!r} field: {dict(record)!r}",
                farm_name=self.name,
            )
        return app_name

    def _add(self, record: Record) -> ApplicationName:
        """Store a copy of a record, refusing duplicate names."""
        app_name = self._get_name(record)
        if app_name in self._applications:
            raise ApplicationExists(farm_name=self.name, application=app_name)
        self._applications[app_name] = copy.deepcopy(dict(record))
        return app_name

    def _get(self, application: ApplicationName) -> MutableRecord:
        try:
            return self._applications[application]
        except KeyError as err:
            raise ApplicationNotFound(farm_name=self.name, application=application) from err

    def list_applications(self) -> Records:
        return [copy.deepcopy(record) for record in self._applications.values()]

    def set_application_enabled(self, application: ApplicationName, enabled: bool) -> None:
        record = self._get(application)
        record[self.enabled_field] = bool(enabled)
        self.logger.info(
            "%s application %r on farm %r",
            "Enabled" if enabled else "Disabled",
            application,
            self.name,
        )

    def create_application(self, record: Record) -> None:
        app_name = self._add(record)
        self.logger.info("Created application %r on farm %r", app_name, self.name)
