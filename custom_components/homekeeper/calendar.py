"""Calendar entity for the HomeKeeper integration."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from dateutil.parser import parse as dtparse
from homeassistant.components.calendar import (
    CalendarEntity,
    CalendarEntityFeature,
    CalendarEvent,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.util import dt as dt_util
from homekeeper_api import (
    AgendaItem,
    CalendarEntry,
    CalendarEntryMutation,
    HomeKeeperError,
    HomeTask,
    Occurrence,
    RecurrencePattern,
    collect_agenda,
)

from .const import (
    DEFAULT_EVENT_DURATION_MINUTES,
    DOMAIN,
    TASK_START_HOUR,
    TASK_TITLE_PREFIX,
    TASK_UID_PREFIX,
    UPCOMING_LOOKAHEAD_DAYS,
)
from .coordinator import HomeKeeperCoordinator, HomeKeeperData
from .models import HomeKeeperRuntimeData

_LOGGER = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")

_RRULE_PATTERNS: dict[tuple[str, int], RecurrencePattern] = {
    ("DAILY", 1): RecurrencePattern.DAILY,
    ("WEEKLY", 1): RecurrencePattern.WEEKLY,
    ("WEEKLY", 2): RecurrencePattern.BI_WEEKLY,
    ("MONTHLY", 1): RecurrencePattern.MONTHLY,
    ("MONTHLY", 3): RecurrencePattern.QUARTERLY,
    ("MONTHLY", 6): RecurrencePattern.SEMI_ANNUALLY,
    ("YEARLY", 1): RecurrencePattern.ANNUALLY,
}
_RRULE_KEYS = {"FREQ", "INTERVAL", "UNTIL", "WKST"}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the HomeKeeper calendar entity from a config entry."""
    runtime_data: HomeKeeperRuntimeData = entry.runtime_data
    async_add_entities([HomeKeeperCalendarEntity(runtime_data.coordinator)])


class HomeKeeperCalendarEntity(
    CoordinatorEntity[HomeKeeperCoordinator], CalendarEntity
):
    """A calendar of one home's tasks and calendar entries."""

    _attr_has_entity_name = True
    _attr_supported_features = (
        CalendarEntityFeature.CREATE_EVENT
        | CalendarEntityFeature.DELETE_EVENT
        | CalendarEntityFeature.UPDATE_EVENT
    )

    def __init__(self, coordinator: HomeKeeperCoordinator) -> None:
        super().__init__(coordinator)
        self._attr_unique_id = f"{DOMAIN}_{coordinator.home_id}"
        self._attr_name = coordinator.home_name

    @property
    def event(self) -> CalendarEvent | None:
        """Return the current or next upcoming event."""
        now = dt_util.now()
        events = self._events_between(
            now, now + timedelta(days=UPCOMING_LOOKAHEAD_DAYS)
        )
        return events[0] if events else None

    async def async_get_events(
        self,
        hass: HomeAssistant,
        start_date: datetime,
        end_date: datetime,
    ) -> list[CalendarEvent]:
        """Return events within the requested time range."""
        return self._events_between(start_date, end_date)

    async def async_create_event(self, **kwargs: Any) -> None:
        """Create a new calendar entry."""
        _LOGGER.debug("async_create_event called with kwargs: %s", kwargs)
        mutation = _mutation_or_raise(kwargs)
        try:
            await self.coordinator.client.async_create_calendar_entry(mutation)
        except HomeKeeperError as err:
            raise HomeAssistantError(f"Failed to create event: {err}") from err
        await self.coordinator.async_request_refresh()

    async def async_update_event(
        self,
        uid: str,
        event: dict[str, Any],
        recurrence_id: str | None = None,
        recurrence_range: str | None = None,
    ) -> None:
        """Update an existing calendar entry (the whole series)."""
        _reject_task_uid(uid)
        mutation = _mutation_or_raise(event)
        try:
            await self.coordinator.client.async_update_calendar_entry(uid, mutation)
        except HomeKeeperError as err:
            raise HomeAssistantError(f"Failed to update event: {err}") from err
        await self.coordinator.async_request_refresh()

    async def async_delete_event(
        self,
        uid: str,
        recurrence_id: str | None = None,
        recurrence_range: str | None = None,
    ) -> None:
        """Delete a calendar entry (the whole series)."""
        _reject_task_uid(uid)
        try:
            await self.coordinator.client.async_delete_calendar_entry(uid)
        except HomeKeeperError as err:
            raise HomeAssistantError(f"Failed to delete event: {err}") from err
        await self.coordinator.async_request_refresh()

    def _events_between(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        return _collect_events(
            self.coordinator.data or HomeKeeperData(),
            start,
            end,
            dt_util.get_default_time_zone(),
        )


# --------------------------------------------------------------------------- #
#  Mapping helpers
# --------------------------------------------------------------------------- #


def _collect_events(
    data: HomeKeeperData, start: datetime, end: datetime, tz: tzinfo
) -> list[CalendarEvent]:
    """Expand and map everything overlapping ``[start, end)``.

    Occurrence dates follow the stored timestamps, which may fall on a
    different calendar day than local time, so the expansion window is
    padded by a day each side and the overlap check does the trimming.
    """
    items = collect_agenda(
        data.entries.values(),
        data.tasks.values(),
        start.astimezone(tz).date() - timedelta(days=1),
        end.astimezone(tz).date() + timedelta(days=1),
    )

    events: list[CalendarEvent] = []
    for item in items:
        try:
            ev = _item_to_event(item, tz)
        except Exception:  # noqa: BLE001
            _LOGGER.warning(
                "Failed to map occurrence of %s (%s) on %s",
                item.occurrence.source_identity,
                item.title,
                item.date,
                exc_info=True,
            )
            continue
        if _as_datetime(ev.end, tz) <= start or _as_datetime(ev.start, tz) >= end:
            continue
        events.append(ev)

    events.sort(key=_sort_key)
    return events


def _reject_task_uid(uid: str) -> None:
    if uid.startswith(TASK_UID_PREFIX):
        raise HomeAssistantError("Tasks can only be changed in the HomeKeeper app")


def _mutation_or_raise(data: dict[str, Any]) -> CalendarEntryMutation:
    try:
        return _kwargs_to_mutation(data, dt_util.get_default_time_zone())
    except ValueError as err:
        raise HomeAssistantError(str(err)) from err


def _as_datetime(value: date | datetime, tz: tzinfo = UTC) -> datetime:
    """Turn an all-day ``date`` into midnight in ``tz``; pass datetimes through."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min, tzinfo=tz)


def _sort_key(ev: CalendarEvent) -> datetime:
    """Normalise a CalendarEvent.start to a tz-aware datetime for sorting.

    All-day events store ``start`` as ``date``; timed events as ``datetime``.
    We convert ``date`` → midnight UTC so both types are comparable.
    """
    return _as_datetime(ev.start)


def _localize(value: datetime, tz: tzinfo) -> datetime:
    """Attach ``tz`` to naive datetimes; convert aware ones into it."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def _recurrence_id(record: CalendarEntry | HomeTask, occurrence: Occurrence) -> str | None:
    if record.is_recurring and record.recurrence_pattern:
        return occurrence.date.strftime("%Y%m%d")
    return None


def _item_to_event(item: AgendaItem, tz: tzinfo) -> CalendarEvent:
    """Map one agenda item to a HA CalendarEvent."""
    if isinstance(item.record, HomeTask):
        return _task_to_event(item.record, item.occurrence, tz)
    return _entry_to_event(item.record, item.occurrence, tz)


def _task_to_event(task: HomeTask, occurrence: Occurrence, tz: tzinfo) -> CalendarEvent:
    """Tasks show as a one-hour slot on their due date."""
    summary = f"{TASK_TITLE_PREFIX}{task.title}"
    start = datetime.combine(occurrence.date, time(TASK_START_HOUR), tzinfo=tz)
    return CalendarEvent(
        summary=summary,
        start=start,
        end=start + timedelta(minutes=DEFAULT_EVENT_DURATION_MINUTES),
        description=task.description or summary,
        uid=f"{TASK_UID_PREFIX}{task.id}",
        recurrence_id=_recurrence_id(task, occurrence),
    )


def _entry_to_event(
    entry: CalendarEntry, occurrence: Occurrence, tz: tzinfo
) -> CalendarEvent:
    """Shift a calendar entry onto the occurrence date, keeping its duration."""
    if entry.start_time is None:
        raise ValueError(f"Calendar entry {entry.id} has no start time")

    if entry.all_day:
        first_day = entry.start_time.date()
        last_day = entry.end_time.date() if entry.end_time else first_day
        # Stored end is inclusive; HA expects an exclusive end date.
        span = max((last_day - first_day).days, 0) + 1
        return CalendarEvent(
            summary=entry.title,
            start=occurrence.date,
            end=occurrence.date + timedelta(days=span),
            description=entry.description,
            location=entry.location,
            uid=entry.id,
            recurrence_id=_recurrence_id(entry, occurrence),
        )

    # The expander dated the entry by its stored timestamp; shift on that
    # same basis before converting to local time.
    shift = occurrence.date - entry.start_time.date()
    start = _localize(entry.start_time + shift, tz)
    end = _localize(entry.end_time + shift, tz) if entry.end_time else None
    if end is None or end <= start:
        end = start + timedelta(minutes=DEFAULT_EVENT_DURATION_MINUTES)
    return CalendarEvent(
        summary=entry.title,
        start=start,
        end=end,
        description=entry.description,
        location=entry.location,
        uid=entry.id,
        recurrence_id=_recurrence_id(entry, occurrence),
    )


def _rrule_to_recurrence(rule: str) -> tuple[RecurrencePattern, date | None]:
    """Map a simple RRULE onto a named pattern and an optional end date.

    Only FREQ/INTERVAL combinations that have a named pattern are accepted;
    BYDAY, COUNT and friends raise ``ValueError``.
    """
    body = rule.removeprefix("RRULE:")
    parts = dict(
        part.split("=", 1) for part in body.split(";") if "=" in part
    )
    unsupported = set(parts) - _RRULE_KEYS
    if unsupported:
        raise ValueError(f"Unsupported recurrence rule parts: {sorted(unsupported)}")

    try:
        interval = int(parts.get("INTERVAL", "1"))
    except ValueError as err:
        raise ValueError(f"Invalid INTERVAL in {rule!r}") from err
    pattern = _RRULE_PATTERNS.get((parts.get("FREQ", "").upper(), interval))
    if pattern is None:
        raise ValueError(f"Unsupported recurrence rule: {rule!r}")

    until = parts.get("UNTIL")
    return pattern, dtparse(until).date() if until else None


def _kwargs_to_mutation(data: dict[str, Any], tz: tzinfo) -> CalendarEntryMutation:
    """Convert HA calendar service call data to a CalendarEntryMutation.

    HA passes different keys depending on the source:
    - UI/service call: start_date_time / end_date_time (timed)
                       start_date / end_date (all-day)
    - Automation:      dtstart / dtend  OR  start / end
    """
    if data.get("start_date_time") or isinstance(data.get("dtstart"), datetime):
        dtstart = data.get("start_date_time") or data.get("dtstart") or data.get("start")
        dtend = data.get("end_date_time") or data.get("dtend") or data.get("end")
        all_day = False
    elif data.get("start_date") or isinstance(data.get("dtstart"), date):
        dtstart = data.get("start_date") or data.get("dtstart") or data.get("start")
        dtend = data.get("end_date") or data.get("dtend") or data.get("end")
        all_day = True
    else:
        dtstart = data.get("dtstart") or data.get("start")
        dtend = data.get("dtend") or data.get("end")
        all_day = isinstance(dtstart, date) and not isinstance(dtstart, datetime)

    # HA may pass strings from service calls
    if isinstance(dtstart, str):
        dtstart = dtparse(dtstart)
    if isinstance(dtend, str):
        dtend = dtparse(dtend)

    if all_day:
        if isinstance(dtstart, datetime):
            dtstart = dtstart.date()
        if isinstance(dtend, datetime):
            dtend = dtend.date()
        if not isinstance(dtstart, date):
            raise ValueError("All-day events need a start date")
        # HA end dates are exclusive; stored end dates are inclusive.
        last_day = dtend - timedelta(days=1) if isinstance(dtend, date) else dtstart
        if last_day < dtstart:
            last_day = dtstart
        start_time = datetime.combine(dtstart, time.min, tzinfo=tz)
        end_time = datetime.combine(last_day, time.min, tzinfo=tz)
    else:
        if not isinstance(dtstart, datetime) or not isinstance(dtend, datetime):
            msg = f"Expected datetime for timed events, got {type(dtstart).__name__}/{type(dtend).__name__}"
            raise ValueError(msg)
        start_time = _localize(dtstart, tz)
        end_time = _localize(dtend, tz)

    pattern: RecurrencePattern | None = None
    until: date | None = None
    if data.get("rrule"):
        pattern, until = _rrule_to_recurrence(data["rrule"])

    return CalendarEntryMutation(
        title=data.get("summary", ""),
        start_time=start_time,
        end_time=end_time,
        all_day=all_day,
        description=data.get("description"),
        location=data.get("location"),
        is_recurring=pattern is not None,
        recurrence_pattern=pattern.value if pattern else None,
        recurrence_end_date=until,
    )
