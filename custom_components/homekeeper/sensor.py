"""Due-task sensors for the HomeKeeper integration."""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.util import dt as dt_util
from homekeeper_api import Bucket, DueBuckets, HomeTask, build_dashboard

from .const import DOMAIN
from .coordinator import HomeKeeperCoordinator
from .models import HomeKeeperRuntimeData

_ICONS: dict[Bucket, str] = {
    Bucket.OVERDUE: "mdi:calendar-alert",
    Bucket.THIS_WEEK: "mdi:calendar-week",
    Bucket.THIS_MONTH: "mdi:calendar-month",
    Bucket.THIS_YEAR: "mdi:calendar-range",
    Bucket.LATER: "mdi:calendar-clock",
}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up one due-task sensor per bucket."""
    runtime_data: HomeKeeperRuntimeData = entry.runtime_data
    async_add_entities(
        HomeKeeperDueTasksSensor(runtime_data.coordinator, which)
        for which in Bucket
    )


class HomeKeeperDueTasksSensor(CoordinatorEntity[HomeKeeperCoordinator], SensorEntity):
    """Number of task occurrences falling into one due-soon bucket."""

    _attr_has_entity_name = True
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = "tasks"

    def __init__(self, coordinator: HomeKeeperCoordinator, which: Bucket) -> None:
        super().__init__(coordinator)
        self._bucket = which
        self._attr_unique_id = f"{DOMAIN}_{coordinator.home_id}_{which.value}"
        self._attr_translation_key = f"due_{which.value}"
        self._attr_icon = _ICONS[which]

    def _buckets(self) -> DueBuckets:
        tasks = self.coordinator.data.tasks if self.coordinator.data else {}
        return build_dashboard(tasks.values(), dt_util.now())

    @property
    def native_value(self) -> int:
        return len(self._buckets().get(self._bucket))

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        tasks: dict[str, HomeTask] = (
            self.coordinator.data.tasks if self.coordinator.data else {}
        )
        listed = []
        for occurrence in self._buckets().get(self._bucket):
            task = tasks.get(occurrence.source_identity)
            if task is None:
                continue
            listed.append(
                {
                    "id": task.id,
                    "title": task.title,
                    "date": occurrence.date.isoformat(),
                    "priority": task.priority,
                    "category": task.category,
                    "recurring": task.is_recurring,
                }
            )
        return {"tasks": listed}
