"""The merged view of an old and a new farm, and the actions taken on it."""

# ruff: noqa: F401
from apprecon.reconciliation.models import ActionOutcome, ReconciledRow
from apprecon.reconciliation.actions import (
    available_actions,
    derive_actions,
    parse_flag,
    sorted_actions,
)
from apprecon.reconciliation.reconciler import Reconciler
