"""Tests for loading reconciler configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from apprecon.configuration import ReconcilerConfig
from apprecon.core_engine.join import JoinMode


def test_load_config(temp_testdata: Path):
    """Configs load from JSON, resolving farm locations against the config file."""
    config = ReconcilerConfig.load(temp_testdata.joinpath("reconciler_config.json"))
    assert config.location == temp_testdata.joinpath("reconciler_config.json")
    assert Path(config.old_farm.location) == temp_testdata.joinpath("old_farm.json")
    assert Path(config.new_farm.location) == temp_testdata.joinpath("new_farm.json")

    step = config.get_join_step()
    assert step.left_key == "Name"
    assert step.right_key == "Name"
    assert step.mode is JoinMode.FULL_OUTER
    assert step.right_suffix == "_New"
    assert config.get_sort_field() == "Name"
    assert config.actions.copy_fields == ["Folder", "CommandLine"]
    assert config.log_level == "WARNING"


def test_defaults():
    """A config naming only the farms uses the default join."""
    config = ReconcilerConfig(old_farm={"name": "old"}, new_farm={"name": "new"})
    step = config.get_join_step()
    assert step.left_key == "Name"
    assert step.mode is JoinMode.FULL_OUTER
    assert step.right_suffix == "_New"
    assert config.enabled_field is None
    assert config.new_farm.enabled_field == "Enabled"
    assert config.actions.created_enabled is False
    assert config.old_farm.location is None


def test_absolute_locations_are_kept(temp_dir: Path):
    """Absolute farm locations aren't changed."""
    location = temp_dir.joinpath("farm.json")
    config = ReconcilerConfig(
        location=Path("/somewhere/else/config.json"),
        old_farm={"name": "old", "type": "json", "location": str(location)},
        new_farm={"name": "new"},
    )
    assert Path(config.old_farm.location) == location


def test_bad_mode(temp_testdata: Path):
    """Unknown join modes are rejected when loading."""
    with pytest.raises(ValidationError):
        ReconcilerConfig.load(temp_testdata.joinpath("bad_mode_config.json"))


def test_root_must_be_mapping(temp_testdata: Path):
    """The config root must be a JSON object."""
    with pytest.raises(TypeError):
        ReconcilerConfig.load(temp_testdata.joinpath("list_root_config.json"))
