"""Shared factories for HomeKeeper tests.

Records are built through ``from_api_response`` so every test also goes
through the same row parsing the client uses.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from homekeeper_api import CalendarEntry, HomeTask


def _task_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": "task_1",
        "home_id": "home_1",
        "title": "Replace HVAC filter",
        "description": None,
        "category": "HVAC",
        "priority": "medium",
        "status": "pending",
        "due_date": "2024-03-15",
        "created_at": "2024-01-01T08:00:00+00:00",
        "is_active": True,
        "is_recurring": False,
        "recurrence_pattern": None,
        "recurrence_end_date": None,
    }
    row.update(overrides)
    return row


def _entry_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": "evt_1",
        "title": "Gutter cleaning",
        "description": None,
        "location": None,
        "start_time": "2024-03-04T10:00:00",
        "end_time": "2024-03-04T11:30:00",
        "all_day": False,
        "color": "blue",
        "is_recurring": False,
        "recurrence_pattern": None,
        "recurrence_end_date": None,
        "task_id": None,
    }
    row.update(overrides)
    return row


@pytest.fixture
def task_row() -> Callable[..., dict[str, Any]]:
    return _task_row


@pytest.fixture
def entry_row() -> Callable[..., dict[str, Any]]:
    return _entry_row


@pytest.fixture
def make_task() -> Callable[..., HomeTask]:
    def _make(**overrides: Any) -> HomeTask:
        return HomeTask.from_api_response(_task_row(**overrides))

    return _make


@pytest.fixture
def make_entry() -> Callable[..., CalendarEntry]:
    def _make(**overrides: Any) -> CalendarEntry:
        return CalendarEntry.from_api_response(_entry_row(**overrides))

    return _make
