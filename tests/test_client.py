"""Tests for the HomeKeeper REST client against a recorded fake session."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import aiohttp
import pytest

from homekeeper_api import (
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
    CalendarEntryMutation,
    HomeKeeperApiClient,
    RateLimitError,
)

BASE_URL = "https://example.supabase.co/"
API_KEY = "anon-key"


class FakeResponse:
    def __init__(self, status: int = 200, body: Any = None, headers: dict | None = None):
        self.status = status
        self._body = body
        self.headers = headers or {}

    async def json(self) -> Any:
        return self._body

    async def text(self) -> str:
        return str(self._body)

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *_: Any) -> None:
        return None


class FakeSession:
    """Records every request and replays queued responses."""

    def __init__(self, *responses: FakeResponse | Exception):
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


def _client(*responses: FakeResponse | Exception) -> tuple[HomeKeeperApiClient, FakeSession]:
    session = FakeSession(*responses)
    return HomeKeeperApiClient(BASE_URL, API_KEY, session), session


def _mutation() -> CalendarEntryMutation:
    return CalendarEntryMutation(
        title="Chimney sweep",
        start_time=datetime(2024, 3, 4, 10, 0, tzinfo=timezone.utc),
        end_time=datetime(2024, 3, 4, 11, 0, tzinfo=timezone.utc),
    )


@pytest.mark.asyncio
async def test_get_homes_sends_key_headers():
    client, session = _client(FakeResponse(body=[{"id": "h1", "name": "Main"}]))

    homes = await client.async_get_homes()

    assert [h.name for h in homes] == ["Main"]
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://example.supabase.co/rest/v1/homes"
    assert call["headers"]["apikey"] == API_KEY
    assert call["headers"]["Authorization"] == f"Bearer {API_KEY}"
    assert "Prefer" not in call["headers"]
    assert call["params"]["order"] == "name.asc"


@pytest.mark.asyncio
async def test_get_home_tasks_filters_by_home(task_row):
    client, session = _client(FakeResponse(body=[task_row(), task_row(id="task_2")]))

    tasks = await client.async_get_home_tasks("home_1")

    assert [t.id for t in tasks] == ["task_1", "task_2"]
    params = session.calls[0]["params"]
    assert params["home_id"] == "eq.home_1"
    assert params["is_active"] == "eq.true"
    assert params["order"] == "created_at.desc"


@pytest.mark.asyncio
async def test_get_calendar_entries(entry_row):
    client, session = _client(FakeResponse(body=[entry_row()]))

    entries = await client.async_get_calendar_entries()

    assert entries[0].title == "Gutter cleaning"
    assert session.calls[0]["url"].endswith("/rest/v1/calendar_events")
    assert session.calls[0]["params"]["order"] == "start_time.asc"


@pytest.mark.asyncio
async def test_null_body_is_empty_list():
    client, _ = _client(FakeResponse(body=None))
    assert await client.async_get_calendar_entries() == []


@pytest.mark.asyncio
async def test_create_unwraps_representation(entry_row):
    client, session = _client(FakeResponse(status=201, body=[entry_row(id="evt_9")]))

    created = await client.async_create_calendar_entry(_mutation())

    assert created.id == "evt_9"
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["headers"]["Prefer"] == "return=representation"
    assert call["json"]["title"] == "Chimney sweep"
    assert "params" not in call


@pytest.mark.asyncio
async def test_update_targets_one_row(entry_row):
    client, session = _client(FakeResponse(body=[entry_row(id="evt_1")]))

    await client.async_update_calendar_entry("evt_1", _mutation())

    call = session.calls[0]
    assert call["method"] == "PATCH"
    assert call["params"] == {"id": "eq.evt_1"}


@pytest.mark.asyncio
async def test_delete_accepts_no_content():
    client, session = _client(FakeResponse(status=204))

    assert await client.async_delete_calendar_entry("evt_1") is None
    assert session.calls[0]["method"] == "DELETE"


@pytest.mark.asyncio
async def test_write_with_no_rows_is_an_error():
    client, _ = _client(FakeResponse(body=[]))
    with pytest.raises(ApiResponseError):
        await client.async_create_calendar_entry(_mutation())


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_rejected_key(status):
    client, _ = _client(FakeResponse(status=status))
    with pytest.raises(AuthenticationError):
        await client.async_get_homes()


@pytest.mark.asyncio
async def test_rate_limited():
    client, _ = _client(FakeResponse(status=429, headers={"Retry-After": "12"}))
    with pytest.raises(RateLimitError) as exc_info:
        await client.async_get_homes()
    assert exc_info.value.retry_after == 12.0
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("header", "expected"),
    [(None, None), ("Wed, 21 Oct 2015 07:28:00 GMT", 0.0), ("soon", None)],
)
async def test_rate_limited_odd_retry_after(header, expected):
    headers = {"Retry-After": header} if header else {}
    client, _ = _client(FakeResponse(status=429, headers=headers))
    with pytest.raises(RateLimitError) as exc_info:
        await client.async_get_homes()
    assert exc_info.value.retry_after == expected


@pytest.mark.asyncio
async def test_server_error_carries_status():
    client, _ = _client(FakeResponse(status=500, body="boom"))
    with pytest.raises(ApiResponseError) as exc_info:
        await client.async_get_homes()
    assert exc_info.value.status_code == 500
    assert "boom" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error", [aiohttp.ClientConnectionError("refused"), TimeoutError()]
)
async def test_network_failures(error):
    client, _ = _client(error)
    with pytest.raises(ApiConnectionError):
        await client.async_get_homes()


@pytest.mark.asyncio
async def test_injected_session_is_left_open():
    client, session = _client()
    async with client:
        pass
    assert not session.closed
