"""Configuration and shared fixtures for pytest."""

# pylint: disable=redefined-outer-name
import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from apprecon.core_engine.type_hints import Records
from apprecon.farms import InMemoryFarmClient

TEST_DATA_ROOT: Path = Path(__file__).parent.joinpath("testdata")
"""The root of the test data."""


def get_test_file_path(test_file_name: str) -> Path:
    """Get the path to a specific test file."""
    return TEST_DATA_ROOT.joinpath(test_file_name)


@pytest.fixture(scope="function")
def temp_dir() -> Iterator[Path]:
    """A fixture providing a temporary directory."""
    with tempfile.TemporaryDirectory() as temp_dir_str:
        yield Path(temp_dir_str)


@pytest.fixture(scope="function")
def temp_testdata(temp_dir: Path) -> Path:
    """A fixture providing a writable copy of the test data directory."""
    target = temp_dir.joinpath("testdata")
    shutil.copytree(TEST_DATA_ROOT, target)
    return target


@pytest.fixture(scope="function")
def old_applications() -> Records:
    """Applications published on the old farm."""
    return [
        {"Name": "Calculator", "Enabled": True, "Folder": "Accessories"},
        {"Name": "Excel", "Enabled": True, "Folder": "Office"},
        {"Name": "Legacy CRM", "Enabled": False, "Folder": "Line of Business"},
        {"Name": "Word", "Enabled": True, "Folder": "Office"},
    ]


@pytest.fixture(scope="function")
def new_applications() -> Records:
    """Applications published on the new farm."""
    return [
        {"Name": "Word", "Enabled": False, "Folder": "Office"},
        {"Name": "excel", "Enabled": True, "Folder": "Office"},
        {"Name": "Excel", "Enabled": True, "Folder": "Office"},
        {"Name": "Teams", "Enabled": True, "Folder": "Collaboration"},
    ]


@pytest.fixture(scope="function")
def old_farm(old_applications: Records) -> InMemoryFarmClient:
    """An in-memory old farm."""
    return InMemoryFarmClient("old", old_applications)


@pytest.fixture(scope="function")
def new_farm(new_applications: Records) -> InMemoryFarmClient:
    """An in-memory new farm."""
    return InMemoryFarmClient("new", new_applications)
