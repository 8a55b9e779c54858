"""Clients for the application administration APIs of farms."""

# ruff: noqa: F401
from apprecon.farms.base import BaseFarmClient
from apprecon.farms.file import JSONFileFarmClient
from apprecon.farms.memory import InMemoryFarmClient
from apprecon.farms.service import add_farm_client_type, get_farm_client, is_supported
