"""Group occurrences into due-soon buckets relative to a given day."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .const import THIS_MONTH_DAYS, THIS_WEEK_DAYS
from .recurrence import Occurrence, as_date


class Bucket(str, enum.Enum):
    """Mutually exclusive time-proximity groups."""

    OVERDUE = "overdue"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    THIS_YEAR = "this_year"
    LATER = "later"


@dataclass
class DueBuckets:
    """Occurrences partitioned by bucket, each list in input order."""

    overdue: list[Occurrence] = field(default_factory=list)
    this_week: list[Occurrence] = field(default_factory=list)
    this_month: list[Occurrence] = field(default_factory=list)
    this_year: list[Occurrence] = field(default_factory=list)
    later: list[Occurrence] = field(default_factory=list)

    def get(self, which: Bucket) -> list[Occurrence]:
        return getattr(self, which.value)

    def counts(self) -> dict[Bucket, int]:
        return {which: len(self.get(which)) for which in Bucket}


def end_of_year(day: date) -> date:
    return date(day.year, 12, 31)


def bucket_for(day: date | datetime, now: date | datetime) -> Bucket:
    """Classify a single date; the first matching rule wins.

    Boundaries are ``now``, ``now + 7 days``, ``now + 30 days`` and the
    last day of ``now``'s year. Dates before ``now`` are overdue.
    """
    day = as_date(day)
    today = as_date(now)
    week_end = today + timedelta(days=THIS_WEEK_DAYS)
    month_end = today + timedelta(days=THIS_MONTH_DAYS)

    if day < today:
        return Bucket.OVERDUE
    if day <= week_end:
        return Bucket.THIS_WEEK
    if day <= month_end:
        return Bucket.THIS_MONTH
    if day <= end_of_year(today):
        return Bucket.THIS_YEAR
    return Bucket.LATER


def bucket(occurrences: Iterable[Occurrence], now: date | datetime) -> DueBuckets:
    """Partition occurrences into disjoint buckets relative to ``now``."""
    result = DueBuckets()
    for occurrence in occurrences:
        result.get(bucket_for(occurrence.date, now)).append(occurrence)
    return result
