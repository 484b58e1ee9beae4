"""Dashboard and calendar views built from tasks and calendar entries."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from .buckets import DueBuckets, bucket
from .const import DASHBOARD_HORIZON_DAYS
from .markers import Marker, build_markers, group_by_date
from .models import CalendarEntry, HomeTask
from .recurrence import Occurrence, OccurrenceKey, as_date, expand

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgendaItem:
    """An occurrence paired with the record it was generated from."""

    occurrence: Occurrence
    record: CalendarEntry | HomeTask

    @property
    def date(self) -> date:
        return self.occurrence.date

    @property
    def title(self) -> str:
        return self.record.title


@dataclass
class CalendarMonth:
    """Everything a month calendar needs for one visible month."""

    window_start: date
    window_end: date
    items: list[AgendaItem] = field(default_factory=list)
    occurrences_by_date: dict[date, list[Occurrence]] = field(default_factory=dict)
    markers: dict[date, Marker] = field(default_factory=dict)

    def on(self, day: date) -> list[AgendaItem]:
        """Items falling on ``day``, in marker order."""
        return [item for item in self.items if item.date == day]


def collect_agenda(
    entries: Iterable[CalendarEntry],
    tasks: Iterable[HomeTask],
    window_start: date | datetime,
    window_end: date | datetime,
) -> list[AgendaItem]:
    """Expand calendar entries and open tasks into one date-ordered agenda.

    Entries come first, then open tasks that have no calendar entry of
    their own. One identity never yields two items on the same date.
    """
    entries = list(entries)
    seen: set[OccurrenceKey] = set()
    items: list[AgendaItem] = []

    for entry in entries:
        source = entry.to_recurrence_source()
        if source is None:
            _LOGGER.debug("Skipping calendar entry %s without a start time", entry.id)
            continue
        items.extend(
            AgendaItem(occ, entry)
            for occ in expand(source, window_start, window_end, seen=seen)
        )

    linked = {entry.task_id for entry in entries if entry.task_id}
    for task in tasks:
        if not task.is_open or task.id in linked:
            continue
        source = task.to_recurrence_source()
        if source is None:
            _LOGGER.debug("Skipping task %s without a due or creation date", task.id)
            continue
        items.extend(
            AgendaItem(occ, task)
            for occ in expand(source, window_start, window_end, seen=seen)
        )

    items.sort(key=lambda item: item.date)
    return items


def month_window(year: int, month: int) -> tuple[date, date]:
    """First day of the previous month to last day of the next month."""
    first = date(year, month, 1)
    return (
        first - relativedelta(months=1),
        first + relativedelta(months=2) - timedelta(days=1),
    )


def build_calendar_month(
    entries: Iterable[CalendarEntry],
    tasks: Iterable[HomeTask],
    year: int,
    month: int,
) -> CalendarMonth:
    """Build markers and per-day items for a month, with one month of buffer."""
    window_start, window_end = month_window(year, month)
    items = collect_agenda(entries, tasks, window_start, window_end)
    by_date = group_by_date(item.occurrence for item in items)
    return CalendarMonth(
        window_start=window_start,
        window_end=window_end,
        items=items,
        occurrences_by_date=by_date,
        markers=build_markers(by_date),
    )


def build_dashboard(
    tasks: Iterable[HomeTask],
    now: date | datetime,
    *,
    horizon_days: int = DASHBOARD_HORIZON_DAYS,
) -> DueBuckets:
    """Bucket the upcoming occurrences of every open task.

    Each task is expanded from its own anchor date, so a missed due date is
    always seen however long ago it was. Past occurrences are kept only when
    they are a task's first one, so a daily task does not fill the overdue
    bucket.
    """
    today = as_date(now)
    window_end = today + timedelta(days=horizon_days)

    occurrences: list[Occurrence] = []
    for task in tasks:
        if not task.is_open:
            continue
        source = task.to_recurrence_source()
        if source is None:
            continue
        occurrences.extend(
            occ
            for occ in expand(source, source.start_date, window_end)
            if occ.date >= today or occ.is_first
        )

    occurrences.sort(key=lambda occ: occ.date)
    return bucket(occurrences, today)
