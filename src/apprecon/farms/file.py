"""A farm client backed by a JSON snapshot file."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from apprecon.core_engine.exceptions import FarmOperationError
from apprecon.core_engine.type_hints import ApplicationName, FarmName, Location, Record, Records
from apprecon.farms.memory import InMemoryFarmClient

APPLICATIONS_KEY = "applications"
"""The key of the application list when the file contains a mapping."""


class JSONFileFarmClient(InMemoryFarmClient):
    """A farm whose applications are stored in a JSON file.

    The file contains either a list of application records, or a mapping
    with an 'applications' list. The file is re-read on every listing and
    rewritten after every change, so several clients can share a file.

    """

    def __init__(self, name: FarmName, location: Location, **kwargs: Any):
        super().__init__(name, **kwargs)
        self.location = Path(location)
        """The location of the JSON file."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, location={str(self.location)!r})"

    def _read(self) -> Records:
        """Read the application records from the file."""
        try:
            with self.location.open("r", encoding="utf-8") as stream:
                contents = json.load(stream)
        except (OSError, json.JSONDecodeError) as err:
            raise FarmOperationError(
                f"Unable to read applications from {str(self.location)!r}: {err}",
                farm_name=self.name,
            ) from err

        if isinstance(contents, dict):
            contents = contents.get(APPLICATIONS_KEY)
        if not isinstance(contents, list) or not all(isinstance(rec, dict) for rec in contents):
            raise FarmOperationError(
                f"Expected a list of application records in {str(self.location)!r}",
                farm_name=self.name,
            )
        return contents

    def _load(self):
        """Replace the in-memory applications with the file's contents."""
        self._applications = {}
        for record in self._read():
            self._add(record)

    def _save(self):
        """Write the in-memory applications back to the file.

        The contents are serialised in full and written to a temporary file
        which then replaces the original, so a failed write leaves the file
        unchanged.

        """
        contents = {APPLICATIONS_KEY: list(self._applications.values())}
        try:
            serialised = json.dumps(contents, indent=2)
        except (TypeError, ValueError) as err:
            raise FarmOperationError(
                f"Unable to serialise applications for {str(self.location)!r}: {err}",
                farm_name=self.name,
            ) from err

        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.location.parent,
                prefix=f".{self.location.name}.",
                suffix=".tmp",
                delete=False,
            ) as stream:
                temp_path = stream.name
                stream.write(serialised)
            os.replace(temp_path, self.location)
        except OSError as err:
            if temp_path is not None and os.path.exists(temp_path):
                os.remove(temp_path)
            raise FarmOperationError(
                f"Unable to write applications to {str(self.location)!r}: {err}",
                farm_name=self.name,
            ) from err

    def list_applications(self) -> Records:
        self._load()
        return super().list_applications()

    def set_application_enabled(self, application: ApplicationName, enabled: bool) -> None:
        self._load()
        super().set_application_enabled(application, enabled)
        self._save()

    def create_application(self, record: Record) -> None:
        self._load()
        super().create_application(record)
        self._save()
