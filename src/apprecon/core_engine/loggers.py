"""Logger setup for the reconciler."""

import logging
import sys
import time
from typing import Union

PACKAGE_LOGGER_NAME = "apprecon"
"""The name of the logger that the package's components log beneath."""
LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s: %(message)s"
"""The format for log records emitted by the default handler."""


# pylint: disable=too-few-public-methods
class LogNameFilter(logging.Filter):
    """Trim the logger's name to the last dotted component."""

    def filter(self, record):
        record.name = record.name.rsplit(".", 1)[-1]
        return True


class UTCFormatter(logging.Formatter):
    """A formatter with timestamps in the UTC timezone."""

    converter = time.gmtime


def get_default_handler() -> logging.Handler:
    """Get the default logging handler, writing to stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(LogNameFilter())
    handler.setFormatter(UTCFormatter(LOG_FORMAT))
    return handler


def get_logger(component: str = PACKAGE_LOGGER_NAME) -> logging.Logger:
    """Get a component logger beneath the package logger.

    The package logger handles its own records and does not propagate, so
    embedding applications get reconciler output without configuring logging.

    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if not package_logger.handlers:  # First time configuration.
        package_logger.propagate = False
        package_logger.addHandler(get_default_handler())
        package_logger.setLevel(logging.INFO)

    if component == PACKAGE_LOGGER_NAME:
        return package_logger
    return get_child_logger(component, package_logger)


def get_child_logger(component: str, parent: logging.Logger) -> logging.Logger:
    """Get a child logger from a parent.

    These propagate messages up to the parent, rather than handling
    messages themselves.

    """
    if parent.name == "root":
        logger_name = component
    else:
        logger_name = f"{parent.name}.{component}"
    return logging.getLogger(logger_name)


def set_log_level(level: Union[int, str]) -> None:
    """Set the level of the package logger (e.g. 'DEBUG' or `logging.INFO`)."""
    if isinstance(level, str):
        level = level.upper()
    get_logger().setLevel(level)
