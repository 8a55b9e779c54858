"""Derivation of the actions available for reconciled rows."""

from collections.abc import Iterable
from typing import Optional

from apprecon.core_engine.join import JoinedRow
from apprecon.core_engine.records import MISSING, get_field
from apprecon.core_engine.type_hints import ALL_ACTIONS, Action, FieldName, Record, Value
from apprecon.reconciliation.models import ReconciledRow

TRUTHY_STRINGS = frozenset({"true", "yes", "y", "1", "enabled", "on"})
"""String values of an enabled flag which mean 'enabled'."""
FALSY_STRINGS = frozenset({"false", "no", "n", "0", "disabled", "off", ""})
"""String values of an enabled flag which mean 'disabled'."""


def parse_flag(value: Value) -> Optional[bool]:
    """Interpret an enabled flag, returning `None` if it's absent or unrecognised."""
    if value is MISSING or value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUTHY_STRINGS:
            return True
        if lowered in FALSY_STRINGS:
            return False
    return None


def _toggle_actions(
    record: Optional[Record], enabled_field: FieldName, enable: Action, disable: Action
) -> set[Action]:
    """Get the enable/disable action for one side of a row."""
    if record is None:
        return set()
    enabled = parse_flag(get_field(record, enabled_field))
    if enabled is None:
        # Unknown state, so either action is meaningful.
        return {enable, disable}
    return {disable} if enabled else {enable}


def derive_actions(
    row: JoinedRow, enabled_field: FieldName, new_enabled_field: Optional[FieldName] = None
) -> frozenset[Action]:
    """Derive the actions available for a joined row of old (left) and new (right)
    farm applications.

    `enabled_field` holds the enabled flag of old farm applications, and of new
    farm applications unless the new farm uses a different `new_enabled_field`.

    """
    new_enabled_field = new_enabled_field or enabled_field
    actions = _toggle_actions(row.left, enabled_field, "enable_old", "disable_old")
    actions |= _toggle_actions(row.right, new_enabled_field, "enable_new", "disable_new")
    if row.has_left and not row.has_right:
        actions.add("create_new")
    return frozenset(actions)


def available_actions(rows: Iterable[ReconciledRow]) -> frozenset[Action]:
    """Get the actions supported by every row in a selection."""
    available: Optional[frozenset[Action]] = None
    for row in rows:
        available = row.actions if available is None else available & row.actions
    return available or frozenset()


def sorted_actions(actions: Iterable[Action]) -> list[Action]:
    """Sort actions into display order."""
    actions = set(actions)
    return [action for action in ALL_ACTIONS if action in actions]
