"""Recurring task and event expansion.

Turns a task or calendar event that repeats on a named pattern into the
concrete dates it falls on inside a query window. Expansion is a pure
function of its arguments:

- calendar-month steps use ``dateutil.relativedelta`` and are computed from
  the anchor date, so 31 Jan steps to 29 Feb, 31 Mar, 30 Apr (clamped, never
  drifting to the 29th);
- a source without an explicit end date stops one year after its start;
- every call stops after ``MAX_OCCURRENCES`` loop iterations, whatever the
  pattern or window.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from .const import DEFAULT_HORIZON_DAYS, MAX_OCCURRENCES

_LOGGER = logging.getLogger(__name__)

OccurrenceKey = tuple[str, date]


class RecurrencePattern(str, enum.Enum):
    """Named step rules a task or event can repeat on."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUALLY = "semi-annually"
    ANNUALLY = "annually"


_ALIASES: dict[str, RecurrencePattern] = {
    "biweekly": RecurrencePattern.BI_WEEKLY,
    "semiannually": RecurrencePattern.SEMI_ANNUALLY,
    "yearly": RecurrencePattern.ANNUALLY,
}

_STEPS: dict[RecurrencePattern, relativedelta] = {
    RecurrencePattern.DAILY: relativedelta(days=1),
    RecurrencePattern.WEEKLY: relativedelta(weeks=1),
    RecurrencePattern.BI_WEEKLY: relativedelta(weeks=2),
    RecurrencePattern.MONTHLY: relativedelta(months=1),
    RecurrencePattern.QUARTERLY: relativedelta(months=3),
    RecurrencePattern.SEMI_ANNUALLY: relativedelta(months=6),
    RecurrencePattern.ANNUALLY: relativedelta(years=1),
}

# Unrecognized patterns step one day at a time.
_FALLBACK_STEP = _STEPS[RecurrencePattern.DAILY]


@dataclass(frozen=True)
class RecurrenceSource:
    """The scheduling fields of a task or calendar event.

    Rebuilt from the underlying record on every expansion; ``start_date``
    must already be a valid date.
    """

    identity: str
    start_date: date
    end_date: date | None = None
    pattern: str | None = None
    is_recurring: bool = False
    color: str | None = None

    @property
    def repeats(self) -> bool:
        """Whether this source expands to more than its start date.

        A recurring flag without any pattern string behaves like a one-off.
        """
        return self.is_recurring and bool(self.pattern and self.pattern.strip())

    @property
    def effective_end(self) -> date:
        """The explicit end date, or the default one-year horizon."""
        if self.end_date is not None:
            return as_date(self.end_date)
        return as_date(self.start_date) + timedelta(days=DEFAULT_HORIZON_DAYS)


@dataclass(frozen=True)
class Occurrence:
    """One concrete date produced from a recurrence source."""

    occurrence_index: int
    date: date
    source_identity: str
    is_first: bool
    color: str | None = None

    @property
    def key(self) -> OccurrenceKey:
        return (self.source_identity, self.date)


def as_date(value: date | datetime) -> date:
    """Reduce a datetime to its calendar date; return dates unchanged."""
    if isinstance(value, datetime):
        return value.date()
    return value


def normalize_pattern(value: str | None) -> RecurrencePattern | None:
    """Map a free-form pattern string onto ``RecurrencePattern``.

    Matching ignores case and surrounding whitespace, and treats ``_`` and
    spaces like ``-``. Returns None for empty or unrecognized values.
    """
    if not value:
        return None
    key = value.strip().lower().replace("_", "-").replace(" ", "-")
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return RecurrencePattern(key)
    except ValueError:
        return None


def next_date(
    start: date, pattern: RecurrencePattern | None, index: int
) -> date:
    """Return the ``index``-th step from ``start`` (index 0 is ``start``)."""
    step = _STEPS.get(pattern, _FALLBACK_STEP) if pattern else _FALLBACK_STEP
    return start + step * index


def expand(
    source: RecurrenceSource,
    window_start: date | datetime,
    window_end: date | datetime,
    *,
    seen: set[OccurrenceKey] | None = None,
) -> list[Occurrence]:
    """Expand a source into its occurrences inside an inclusive date window.

    Args:
        source: The task or event scheduling fields.
        window_start: First date of interest (inclusive).
        window_end: Last date of interest (inclusive).
        seen: Optional caller-owned set of ``(identity, date)`` keys. When
            given it is consulted and updated, so occurrences already
            produced for the same identity by an earlier call are skipped.

    Returns:
        Occurrences in ascending date order. Empty when the window is
        inverted.
    """
    first = as_date(window_start)
    last = as_date(window_end)
    if first > last:
        return []

    start = as_date(source.start_date)
    keys: set[OccurrenceKey] = set() if seen is None else seen

    if not source.repeats:
        key = (source.identity, start)
        if first <= start <= last and key not in keys:
            keys.add(key)
            return [Occurrence(0, start, source.identity, True, source.color)]
        return []

    pattern = normalize_pattern(source.pattern)
    if pattern is None:
        _LOGGER.warning(
            "Unrecognized recurrence pattern %r on %s, stepping daily",
            source.pattern,
            source.identity,
        )

    end = source.effective_end
    occurrences: list[Occurrence] = []
    cursor = start
    count = 0
    while cursor <= end and count < MAX_OCCURRENCES:
        if first <= cursor <= last:
            key = (source.identity, cursor)
            if key not in keys:
                keys.add(key)
                occurrences.append(
                    Occurrence(
                        occurrence_index=count,
                        date=cursor,
                        source_identity=source.identity,
                        is_first=count == 0,
                        color=source.color,
                    )
                )
        count += 1
        cursor = next_date(start, pattern, count)

    if count >= MAX_OCCURRENCES and cursor <= end:
        _LOGGER.debug(
            "Stopped expanding %s after %d occurrences (next %s, end %s)",
            source.identity,
            MAX_OCCURRENCES,
            cursor,
            end,
        )
    return occurrences


def merge_occurrences(*sequences: Iterable[Occurrence]) -> list[Occurrence]:
    """Merge expansion results, keeping one occurrence per identity and date.

    The first occurrence seen for a key wins; the result is sorted by date
    with ties kept in input order.
    """
    merged: dict[OccurrenceKey, Occurrence] = {}
    for sequence in sequences:
        for occurrence in sequence:
            merged.setdefault(occurrence.key, occurrence)
    return sorted(merged.values(), key=lambda occ: occ.date)
