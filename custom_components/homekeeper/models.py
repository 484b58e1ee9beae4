"""Runtime data models for the HomeKeeper integration."""

from __future__ import annotations

from dataclasses import dataclass

from homekeeper_api import HomeKeeperApiClient

from .coordinator import HomeKeeperCoordinator


@dataclass
class HomeKeeperRuntimeData:
    """Data stored in config_entry.runtime_data."""

    client: HomeKeeperApiClient
    coordinator: HomeKeeperCoordinator
