"""Data models for HomeKeeper backend rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from dateutil.parser import isoparse

from .const import DEFAULT_EVENT_COLOR, DEFAULT_TASK_COLOR, PRIORITY_COLORS, STATUS_COMPLETED
from .recurrence import RecurrenceSource

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Home:
    """A household tracked in the app."""

    id: str
    name: str
    address: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Home:
        """Construct from a ``homes`` row."""
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            address=data.get("address"),
        )


@dataclass(frozen=True)
class HomeTask:
    """A maintenance task attached to a home."""

    id: str
    home_id: str | None
    title: str
    description: str | None = None
    category: str | None = None
    priority: str | None = None
    status: str | None = None
    due_date: date | None = None
    created_at: datetime | None = None
    is_active: bool = True
    is_recurring: bool = False
    recurrence_pattern: str | None = None
    recurrence_end_date: date | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> HomeTask:
        """Construct from a ``home_tasks`` row."""
        due = _parse_datetime(data.get("due_date"))
        end = _parse_datetime(data.get("recurrence_end_date"))
        return cls(
            id=str(data["id"]),
            home_id=_optional_str(data.get("home_id")),
            title=data.get("title") or "",
            description=data.get("description"),
            category=data.get("category"),
            priority=data.get("priority"),
            status=data.get("status"),
            due_date=due.date() if due else None,
            created_at=_parse_datetime(data.get("created_at")),
            # NULL is_active means the row predates the column; treat as active.
            is_active=data.get("is_active") is not False,
            is_recurring=bool(data.get("is_recurring")),
            recurrence_pattern=data.get("recurrence_pattern"),
            recurrence_end_date=end.date() if end else None,
        )

    @property
    def is_open(self) -> bool:
        """Whether the task is active and not completed."""
        return self.is_active and (self.status or "").lower() != STATUS_COMPLETED

    @property
    def anchor_date(self) -> date | None:
        """Due date, falling back to the creation date."""
        if self.due_date is not None:
            return self.due_date
        if self.created_at is not None:
            return self.created_at.date()
        return None

    @property
    def color(self) -> str:
        return task_color(self.priority)

    def to_recurrence_source(self) -> RecurrenceSource | None:
        """Build the expansion input, or None when there is no anchor date."""
        anchor = self.anchor_date
        if anchor is None:
            return None
        return RecurrenceSource(
            identity=self.id,
            start_date=anchor,
            end_date=self.recurrence_end_date,
            pattern=self.recurrence_pattern,
            is_recurring=self.is_recurring,
            color=self.color,
        )


@dataclass(frozen=True)
class CalendarEntry:
    """A row of the ``calendar_events`` table."""

    id: str
    title: str
    start_time: datetime | None
    end_time: datetime | None
    all_day: bool = False
    description: str | None = None
    location: str | None = None
    color: str | None = None
    is_recurring: bool = False
    recurrence_pattern: str | None = None
    recurrence_end_date: date | None = None
    task_id: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> CalendarEntry:
        """Construct from a ``calendar_events`` row.

        The task link is stored as ``home_task_id`` on newer rows and
        ``task_id`` on older ones.
        """
        end = _parse_datetime(data.get("recurrence_end_date"))
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            start_time=_parse_datetime(data.get("start_time")),
            end_time=_parse_datetime(data.get("end_time")),
            all_day=bool(data.get("all_day")),
            description=data.get("description"),
            location=data.get("location"),
            color=data.get("color"),
            is_recurring=bool(data.get("is_recurring")),
            recurrence_pattern=data.get("recurrence_pattern"),
            recurrence_end_date=end.date() if end else None,
            task_id=_optional_str(data.get("home_task_id") or data.get("task_id")),
        )

    @property
    def identity(self) -> str:
        """Key used for duplicate suppression.

        Entries mirroring a task share the task's id so the task and its
        entry never show twice on the same date.
        """
        return self.task_id or self.id

    def to_recurrence_source(self) -> RecurrenceSource | None:
        """Build the expansion input, or None when the start is missing."""
        if self.start_time is None:
            return None
        return RecurrenceSource(
            identity=self.identity,
            start_date=self.start_time.date(),
            end_date=self.recurrence_end_date,
            pattern=self.recurrence_pattern,
            is_recurring=self.is_recurring,
            color=self.color or DEFAULT_EVENT_COLOR,
        )


@dataclass(frozen=True)
class CalendarEntryMutation:
    """Data for creating or updating a calendar entry.

    Use ``dataclasses.replace()`` to derive modified copies.
    """

    title: str
    start_time: datetime
    end_time: datetime
    all_day: bool = False
    description: str | None = None
    location: str | None = None
    color: str | None = None
    is_recurring: bool = False
    recurrence_pattern: str | None = None
    recurrence_end_date: date | None = None
    task_id: str | None = None

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to a JSON body for the ``calendar_events`` table."""
        return {
            "title": self.title,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "all_day": self.all_day,
            "description": self.description,
            "location": self.location,
            "color": self.color or DEFAULT_EVENT_COLOR,
            "is_recurring": self.is_recurring,
            "recurrence_pattern": self.recurrence_pattern if self.is_recurring else None,
            "recurrence_end_date": (
                self.recurrence_end_date.isoformat()
                if self.is_recurring and self.recurrence_end_date
                else None
            ),
            "task_id": self.task_id,
        }


def task_color(priority: str | None) -> str:
    """Named color for a task priority; unknown priorities are gray."""
    return PRIORITY_COLORS.get((priority or "").lower(), DEFAULT_TASK_COLOR)


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 date or timestamp, returning None when unusable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    try:
        return isoparse(str(value))
    except (ValueError, OverflowError):
        _LOGGER.debug("Ignoring unparseable timestamp %r", value)
        return None
