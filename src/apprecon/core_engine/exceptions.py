"""Errors raised by the reconciler."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from apprecon.core_engine.type_hints import Action, ApplicationName, FarmName

ErrorLocation = str
"""A location (e.g. a farm or a projection) for context within the error."""


class ReconcilerError(Exception):
    """A base exception type for all reconciler errors."""


class ReconcilerErrorMixin(ABC, ReconcilerError):
    """A mixin for errors which are reported back to an operator."""

    @abstractmethod
    def get_message_preamble(self) -> str:
        """Get the start of the message string to be used for logging and feedback.

        This will be joined to the location string with the joiner.
        """

    def get_joiner(self) -> str:
        """The joiner between the preamble and the location string."""
        return "in"

    def to_message_string(self, location: ErrorLocation) -> str:
        """Create a message from the error."""
        return " ".join((self.get_message_preamble(), self.get_joiner(), location))


class ConfigurationError(ReconcilerError, ValueError):
    """An error in the configuration of a join or a projection.

    These are always raised before any matching takes place, so a
    configuration mistake never produces partial output.

    """


class InvalidJoinMode(ConfigurationError):
    """An error raised when a join mode is not one of the supported modes."""

    def __init__(self, *args: object, mode: Any) -> None:
        super().__init__(*args)
        self.mode = mode
        """The rejected join mode value."""


class RuleTemplateError(ConfigurationError):
    """An error raised when a computed field template cannot be compiled or rendered."""


class FarmError(ReconcilerErrorMixin):
    """A base error for failures reported by (or about) a farm."""

    def __init__(self, *args: object, farm_name: FarmName) -> None:
        super().__init__(*args)
        self.farm_name = farm_name
        """The name of the farm the error relates to."""

    def get_message_preamble(self) -> str:
        return str(self.args[0]) if self.args else type(self).__name__

    def get_joiner(self) -> str:
        return "on farm"

    def __str__(self) -> str:
        return self.to_message_string(repr(self.farm_name))


class ApplicationNotFound(FarmError, KeyError):
    """An error raised when an application does not exist on a farm."""

    def __init__(self, *args: object, farm_name: FarmName, application: ApplicationName) -> None:
        super().__init__(*args, farm_name=farm_name)
        self.application = application
        """The name of the missing application."""

    def get_message_preamble(self) -> str:
        return f"Application {self.application!r} not found"


class ApplicationExists(FarmError):
    """An error raised when creating an application which already exists."""

    def __init__(self, *args: object, farm_name: FarmName, application: ApplicationName) -> None:
        super().__init__(*args, farm_name=farm_name)
        self.application = application
        """The name of the existing application."""

    def get_message_preamble(self) -> str:
        return f"Application {self.application!r} already exists"


class FarmOperationError(FarmError):
    """An error raised when a farm cannot be read from or written to."""


class ActionNotAvailable(ReconcilerErrorMixin):
    """An error raised when an action is requested for a row which doesn't support it."""

    def __init__(
        self, *args: object, action: Action, application: Optional[ApplicationName]
    ) -> None:
        super().__init__(*args)
        self.action = action
        """The requested action."""
        self.application = application
        """The application the action was requested for."""

    def get_message_preamble(self) -> str:
        return f"Action {self.action!r} is not available"

    def get_joiner(self) -> str:
        return "for application"

    def __str__(self) -> str:
        return self.to_message_string(repr(self.application))
