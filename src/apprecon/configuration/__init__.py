"""Configuration for the reconciler."""

# ruff: noqa: F401
from apprecon.configuration.base import BaseReconcilerConfig
from apprecon.configuration.models import ActionSettings, FarmConfig, ReconcilerConfig
