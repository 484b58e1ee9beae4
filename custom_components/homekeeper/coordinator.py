"""DataUpdateCoordinator for a single HomeKeeper home."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.exceptions import ConfigEntryAuthFailed
from homeassistant.helpers.debounce import Debouncer
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homekeeper_api import (
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
    CalendarEntry,
    HomeKeeperApiClient,
    HomeTask,
    RateLimitError,
)

from .const import DEFAULT_UPDATE_INTERVAL_SECONDS, DOMAIN, REFRESH_COOLDOWN_SECONDS

_LOGGER = logging.getLogger(__name__)


@dataclass
class HomeKeeperData:
    """Snapshot of one home's tasks and calendar entries, keyed by id."""

    tasks: dict[str, HomeTask] = field(default_factory=dict)
    entries: dict[str, CalendarEntry] = field(default_factory=dict)


class HomeKeeperCoordinator(DataUpdateCoordinator[HomeKeeperData]):
    """Coordinator that polls one home's tasks and calendar entries.

    Writes from the calendar entity call ``async_request_refresh``; the
    debouncer folds bursts of those into a single fetch.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: Any,
        client: HomeKeeperApiClient,
        config_entry: ConfigEntry,
        home_id: str,
        home_name: str,
    ) -> None:
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=f"{DOMAIN}_{home_name}",
            update_interval=timedelta(seconds=DEFAULT_UPDATE_INTERVAL_SECONDS),
            request_refresh_debouncer=Debouncer(
                hass,
                _LOGGER,
                cooldown=REFRESH_COOLDOWN_SECONDS,
                immediate=False,
            ),
        )
        self._client = client
        self._home_id = home_id
        self._home_name = home_name

    @property
    def client(self) -> HomeKeeperApiClient:
        return self._client

    @property
    def home_id(self) -> str:
        return self._home_id

    @property
    def home_name(self) -> str:
        return self._home_name

    async def _async_update_data(self) -> HomeKeeperData:
        """Fetch the home's tasks and all visible calendar entries."""
        try:
            tasks = await self._client.async_get_home_tasks(self._home_id)
            entries = await self._client.async_get_calendar_entries()
        except AuthenticationError as err:
            raise ConfigEntryAuthFailed("API key rejected by backend") from err
        except ApiConnectionError as err:
            raise UpdateFailed(f"Connection error: {err}") from err
        except RateLimitError as err:
            raise UpdateFailed(_rate_limit_message(err)) from err
        except ApiResponseError as err:
            raise UpdateFailed(f"API error: {err}") from err

        task_ids = {task.id for task in tasks}
        # Entries belong to a user, not a home; keep unlinked ones and those
        # mirroring one of this home's tasks.
        home_entries = [
            entry
            for entry in entries
            if entry.task_id is None or entry.task_id in task_ids
        ]
        _LOGGER.debug(
            "Fetched %d tasks and %d calendar entries for %s",
            len(tasks),
            len(home_entries),
            self._home_name,
        )
        return HomeKeeperData(
            tasks={task.id: task for task in tasks},
            entries={entry.id: entry for entry in home_entries},
        )


def _rate_limit_message(err: RateLimitError) -> str:
    if err.retry_after is None:
        return "Rate limited by backend"
    return f"Rate limited by backend, retry after {err.retry_after:g}s"
