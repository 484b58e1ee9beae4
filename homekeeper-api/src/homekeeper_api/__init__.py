"""Household task scheduling: recurrence expansion and a backend client."""

from .const import __version__
from ._client import HomeKeeperApiClient
from .agenda import (
    AgendaItem,
    CalendarMonth,
    build_calendar_month,
    build_dashboard,
    collect_agenda,
    month_window,
)
from .buckets import Bucket, DueBuckets, bucket, bucket_for
from .exceptions import (
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
    HomeKeeperError,
    RateLimitError,
)
from .markers import Marker, build_markers, color_hex, group_by_date
from .models import CalendarEntry, CalendarEntryMutation, Home, HomeTask, task_color
from .recurrence import (
    Occurrence,
    RecurrencePattern,
    RecurrenceSource,
    expand,
    merge_occurrences,
    normalize_pattern,
)

__all__ = [
    "__version__",
    "HomeKeeperApiClient",
    "AgendaItem",
    "CalendarMonth",
    "build_calendar_month",
    "build_dashboard",
    "collect_agenda",
    "month_window",
    "Bucket",
    "DueBuckets",
    "bucket",
    "bucket_for",
    "ApiConnectionError",
    "ApiResponseError",
    "AuthenticationError",
    "HomeKeeperError",
    "RateLimitError",
    "Marker",
    "build_markers",
    "color_hex",
    "group_by_date",
    "CalendarEntry",
    "CalendarEntryMutation",
    "Home",
    "HomeTask",
    "task_color",
    "Occurrence",
    "RecurrencePattern",
    "RecurrenceSource",
    "expand",
    "merge_occurrences",
    "normalize_pattern",
]
