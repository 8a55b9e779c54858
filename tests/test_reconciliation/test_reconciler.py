"""Tests for the reconciler."""

# pylint: disable=redefined-outer-name
from pathlib import Path

import pytest

from apprecon.configuration import ActionSettings, ReconcilerConfig
from apprecon.core_engine.exceptions import ActionNotAvailable, ConfigurationError
from apprecon.core_engine.metadata.steps import JoinStep
from apprecon.core_engine.records import MISSING
from apprecon.farms import InMemoryFarmClient
from apprecon.reconciliation import Reconciler


@pytest.fixture(scope="function")
def reconciler(old_farm: InMemoryFarmClient, new_farm: InMemoryFarmClient) -> Reconciler:
    """A reconciler over the in-memory farms, with the default join."""
    return Reconciler(old_farm, new_farm)


def test_refresh_sorts_by_name(reconciler: Reconciler):
    """Rows are sorted case-insensitively by application name."""
    rows = reconciler.refresh()
    assert [row.name for row in rows] == [
        "Calculator",
        "Excel",
        "excel",
        "Legacy CRM",
        "Teams",
        "Word",
    ]
    assert reconciler.rows == rows


def test_refresh_statuses_and_columns(reconciler: Reconciler):
    """Rows carry both farms' fields, with the new farm's columns suffixed."""
    rows = {row.name: row for row in reconciler.refresh()}
    assert rows["Calculator"].status == "old_only"
    assert rows["Teams"].status == "new_only"
    assert rows["Word"].status == "both"
    assert rows["excel"].status == "new_only"

    word = rows["Word"].joined
    assert list(word) == ["Name", "Enabled", "Folder", "Name_New", "Enabled_New", "Folder_New"]
    assert (word["Enabled"], word["Enabled_New"]) == (True, False)
    assert rows["Teams"].joined["Name"] is MISSING
    assert rows["Teams"].joined["Name_New"] == "Teams"


def test_refresh_actions(reconciler: Reconciler):
    """Each row offers the actions matching its farms and enabled flags."""
    rows = {row.name: row for row in reconciler.refresh()}
    assert rows["Calculator"].actions == frozenset({"disable_old", "create_new"})
    assert rows["Legacy CRM"].actions == frozenset({"enable_old", "create_new"})
    assert rows["Word"].actions == frozenset({"disable_old", "enable_new"})
    assert rows["Teams"].actions == frozenset({"disable_new"})



def test_refresh_uses_each_farms_enabled_field():
    """The new farm's enabled flag is read from the field its client uses."""
    old_farm = InMemoryFarmClient("old", [{"Name": "A", "Enabled": True}])
    new_farm = InMemoryFarmClient(
        "new", [{"Name": "A", "IsEnabled": True}], enabled_field="IsEnabled"
    )
    (row,) = Reconciler(old_farm, new_farm).refresh()
    assert row.actions == frozenset({"disable_old", "disable_new"})

    (row,) = Reconciler(old_farm, new_farm, enabled_field="Enabled").refresh()
    assert row.actions == frozenset({"disable_old", "enable_new", "disable_new"})

def test_apply_enable_new(reconciler: Reconciler, new_farm: InMemoryFarmClient):
    """Enabling in the new farm goes through the new farm's client."""
    rows = {row.name: row for row in reconciler.refresh()}
    outcomes = reconciler.apply("enable_new", [rows["Word"]])
    assert [outcome.success for outcome in outcomes] == [True]
    assert outcomes[0].message == "Enabled 'Word' on 'new'"

    word = next(app for app in new_farm.list_applications() if app["Name"] == "Word")
    assert word["Enabled"] is True

    refreshed = {row.name: row for row in reconciler.refresh()}
    assert refreshed["Word"].actions == frozenset({"disable_old", "disable_new"})


def test_apply_create_new(old_farm: InMemoryFarmClient, new_farm: InMemoryFarmClient):
    """Creating copies the configured fields from the old farm, disabled by default."""
    reconciler = Reconciler(
        old_farm, new_farm, action_settings=ActionSettings(copy_fields=["Folder"])
    )
    rows = {row.name: row for row in reconciler.refresh()}
    outcomes = reconciler.apply("create_new", [rows["Calculator"], rows["Legacy CRM"]])
    assert all(outcome.success for outcome in outcomes)

    created = {app["Name"]: app for app in new_farm.list_applications()}
    assert created["Calculator"] == {"Folder": "Accessories", "Name": "Calculator", "Enabled": False}
    assert created["Legacy CRM"]["Enabled"] is False

    refreshed = {row.name: row for row in reconciler.refresh()}
    assert refreshed["Calculator"].status == "both"
    assert "create_new" not in refreshed["Calculator"].actions


def test_apply_created_enabled(old_farm: InMemoryFarmClient, new_farm: InMemoryFarmClient):
    """Created applications can start enabled."""
    reconciler = Reconciler(
        old_farm, new_farm, action_settings=ActionSettings(created_enabled=True)
    )
    rows = {row.name: row for row in reconciler.refresh()}
    reconciler.apply("create_new", [rows["Calculator"]])
    created = {app["Name"]: app for app in new_farm.list_applications()}
    assert created["Calculator"] == {"Name": "Calculator", "Enabled": True, "Folder": "Accessories"}


def test_apply_skips_unsupported_rows(reconciler: Reconciler, old_farm: InMemoryFarmClient):
    """Rows which don't support an action are skipped, the rest are processed."""
    rows = {row.name: row for row in reconciler.refresh()}
    outcomes = reconciler.apply("disable_old", [rows["Teams"], rows["Calculator"]])
    assert [(o.application, o.success, o.skipped) for o in outcomes] == [
        ("Teams", False, True),
        ("Calculator", True, False),
    ]
    assert outcomes[0].message == "Action 'disable_old' is not available for application 'Teams'"
    calculator = next(app for app in old_farm.list_applications() if app["Name"] == "Calculator")
    assert calculator["Enabled"] is False


def test_apply_strict(reconciler: Reconciler, old_farm: InMemoryFarmClient):
    """In strict mode, nothing is changed if any row doesn't support the action."""
    rows = {row.name: row for row in reconciler.refresh()}
    with pytest.raises(ActionNotAvailable):
        reconciler.apply("disable_old", [rows["Calculator"], rows["Teams"]], strict=True)
    calculator = next(app for app in old_farm.list_applications() if app["Name"] == "Calculator")
    assert calculator["Enabled"] is True


def test_apply_reports_farm_errors(reconciler: Reconciler, new_farm: InMemoryFarmClient):
    """Farm errors fail the row, without stopping the batch."""
    rows = {row.name: row for row in reconciler.refresh()}
    # Created behind the reconciler's back, so the first create will clash.
    new_farm.create_application({"Name": "Calculator", "Enabled": True})
    outcomes = reconciler.apply("create_new", [rows["Calculator"], rows["Legacy CRM"]])
    assert [outcome.success for outcome in outcomes] == [False, True]
    assert outcomes[0].message == "Application 'Calculator' already exists on farm 'new'"


def test_reconciler_checks_join_step(old_farm: InMemoryFarmClient, new_farm: InMemoryFarmClient):
    """A malformed join step is reported when the reconciler is built."""
    step = JoinStep(left_key="Name", left_projection=[{"Expression": str}])
    with pytest.raises(ConfigurationError):
        Reconciler(old_farm, new_farm, step)


def test_custom_join_step(old_farm: InMemoryFarmClient, new_farm: InMemoryFarmClient):
    """The join step controls the merged columns and the rows kept."""
    step = JoinStep(
        left_key="Name",
        left_projection=["Name", {"Name": "Label", "Expression": "{{ Folder }}/{{ Name }}"}],
        right_projection=["Enabled"],
        right_prefix="New",
        mode="Inner",
    )
    rows = Reconciler(old_farm, new_farm, step).refresh()
    assert [dict(row.joined) for row in rows] == [
        {"Name": "Excel", "Label": "Office/Excel", "NewEnabled": True},
        {"Name": "Word", "Label": "Office/Word", "NewEnabled": False},
    ]


def test_from_config(temp_testdata: Path):
    """Reconcilers can be built from config files."""
    config = ReconcilerConfig.load(temp_testdata.joinpath("reconciler_config.json"))
    reconciler = Reconciler.from_config(config)
    rows = reconciler.refresh()
    assert [row.name for row in rows] == ["Calculator", "Excel", "Legacy CRM", "Teams", "Word"]
    assert list(rows[0].joined) == ["Name", "Enabled", "Folder", "Enabled_New", "Folder_New"]

    by_name = {row.name: row for row in rows}
    outcomes = reconciler.apply("create_new", [by_name["Calculator"]])
    assert outcomes[0].success

    created = {
        app["Name"]: app
        for app in reconciler.new_farm.list_applications()  # re-read from the file
    }
    assert created["Calculator"] == {
        "Folder": "Accessories",
        "CommandLine": "calc.exe",
        "Name": "Calculator",
        "Enabled": False,
    }
