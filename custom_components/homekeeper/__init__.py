"""The HomeKeeper integration."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homekeeper_api import HomeKeeperApiClient

from .const import CONF_API_KEY, CONF_HOME_ID, CONF_URL
from .coordinator import HomeKeeperCoordinator
from .models import HomeKeeperRuntimeData

PLATFORMS: list[Platform] = [Platform.CALENDAR, Platform.SENSOR]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up HomeKeeper from a config entry."""
    client = HomeKeeperApiClient(
        entry.data[CONF_URL],
        entry.data[CONF_API_KEY],
        async_get_clientsession(hass),
    )

    coordinator = HomeKeeperCoordinator(
        hass,
        client,
        entry,
        home_id=entry.data[CONF_HOME_ID],
        home_name=entry.title,
    )
    # Raises ConfigEntryNotReady / ConfigEntryAuthFailed on failure.
    await coordinator.async_config_entry_first_refresh()

    entry.runtime_data = HomeKeeperRuntimeData(
        client=client, coordinator=coordinator
    )

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a HomeKeeper config entry."""
    return await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
