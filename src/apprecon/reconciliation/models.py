"""Models for the merged view of two farms."""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict

from apprecon.core_engine.join import JoinedRow
from apprecon.core_engine.type_hints import Action, ApplicationName, RowStatus


@dataclass(frozen=True, eq=False)
class ReconciledRow:
    """An application as seen across the old and new farms."""

    name: Optional[ApplicationName]
    """The application's name, from whichever farm it is published on."""
    joined: JoinedRow
    """The joined row (old farm on the left, new farm on the right)."""
    actions: frozenset[Action]
    """The actions which can be taken for the application."""

    @property
    def status(self) -> RowStatus:
        """Where the application is published."""
        if self.joined.is_matched:
            return "both"
        if self.joined.has_left:
            return "old_only"
        return "new_only"

    def supports(self, action: Action) -> bool:
        """Whether an action can be taken for the application."""
        return action in self.actions


class ActionOutcome(BaseModel):
    """The result of taking an action for a single application."""

    model_config = ConfigDict(frozen=True)

    action: Action
    """The action taken."""
    application: Optional[ApplicationName]
    """The application the action was taken for."""
    success: bool
    """Whether the action succeeded."""
    skipped: bool = False
    """Whether the action was skipped because the row doesn't support it."""
    message: str = ""
    """A human-readable description of the outcome."""

    def __str__(self):  # pydantic's default __str__ strips the model name.
        return super().__repr__()
