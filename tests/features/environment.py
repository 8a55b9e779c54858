"""Hooks for the behave scenarios."""

import logging

from behave.model import Scenario  # type: ignore
from behave.runner import Context  # type: ignore

from apprecon.core_engine.loggers import set_log_level


def before_all(context: Context):
    """Set up the tests."""
    set_log_level(logging.WARNING)


def before_scenario(context: Context, scenario: Scenario):
    """Set up scenarios for behave."""
    if "failing" in scenario.effective_tags:
        scenario.skip("This test is current failing and should be investigated")

    context.old_farm = None
    context.new_farm = None
    context.reconciler = None
    context.outcomes = []
