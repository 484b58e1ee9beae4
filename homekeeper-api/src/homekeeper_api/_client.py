"""HomeKeeper backend client."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import aiohttp
from dateutil.parser import parse as dtparse

from .const import (
    CALENDAR_EVENTS_TABLE,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    HEADER_API_KEY,
    HEADER_PREFER,
    HOME_TASKS_TABLE,
    HOMES_TABLE,
    PREFER_RETURN_REPRESENTATION,
    REST_PATH,
)
from .exceptions import (
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
    RateLimitError,
)
from .models import CalendarEntry, CalendarEntryMutation, Home, HomeTask


class HomeKeeperApiClient:
    """Async client for the HomeKeeper tables on a PostgREST backend.

    Usage::

        async with aiohttp.ClientSession() as session:
            client = HomeKeeperApiClient("https://xyz.supabase.co", key, session)
            homes = await client.async_get_homes()

    If no session is provided, the client creates and manages its own.
    The caller is responsible for calling ``async_close()`` when done
    (or use the client as an async context manager).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        session: aiohttp.ClientSession | None = None,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._rest_url = base_url.rstrip("/") + REST_PATH
        self._api_key = api_key
        self._owns_session = session is None
        self._session = session or aiohttp.ClientSession()
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def __aenter__(self) -> HomeKeeperApiClient:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.async_close()

    async def async_close(self) -> None:
        """Close the HTTP session if the client owns it."""
        if self._owns_session:
            await self._session.close()

    # ------------------------------------------------------------------ #
    #  Homes and tasks
    # ------------------------------------------------------------------ #

    async def async_get_homes(self) -> list[Home]:
        """Fetch every home visible to the configured key."""
        data = await self._request(
            "GET", HOMES_TABLE, params={"select": "*", "order": "name.asc"}
        )
        return [Home.from_api_response(row) for row in data or []]

    async def async_get_home_tasks(self, home_id: str) -> list[HomeTask]:
        """Fetch the active tasks of one home, newest first."""
        data = await self._request(
            "GET",
            HOME_TASKS_TABLE,
            params={
                "select": "*",
                "home_id": f"eq.{home_id}",
                "is_active": "eq.true",
                "order": "created_at.desc",
            },
        )
        return [HomeTask.from_api_response(row) for row in data or []]

    # ------------------------------------------------------------------ #
    #  Calendar entries
    # ------------------------------------------------------------------ #

    async def async_get_calendar_entries(self) -> list[CalendarEntry]:
        """Fetch calendar entries ordered by start time."""
        data = await self._request(
            "GET",
            CALENDAR_EVENTS_TABLE,
            params={"select": "*", "order": "start_time.asc"},
        )
        return [CalendarEntry.from_api_response(row) for row in data or []]

    async def async_create_calendar_entry(
        self, entry: CalendarEntryMutation
    ) -> CalendarEntry:
        """Insert a calendar entry and return the stored row."""
        data = await self._request(
            "POST",
            CALENDAR_EVENTS_TABLE,
            json_body=entry.to_api_dict(),
        )
        return CalendarEntry.from_api_response(_single_row(data))

    async def async_update_calendar_entry(
        self, entry_id: str, entry: CalendarEntryMutation
    ) -> CalendarEntry:
        """Update an existing calendar entry."""
        data = await self._request(
            "PATCH",
            CALENDAR_EVENTS_TABLE,
            params={"id": f"eq.{entry_id}"},
            json_body=entry.to_api_dict(),
        )
        return CalendarEntry.from_api_response(_single_row(data))

    async def async_delete_calendar_entry(self, entry_id: str) -> None:
        """Delete a calendar entry."""
        await self._request(
            "DELETE", CALENDAR_EVENTS_TABLE, params={"id": f"eq.{entry_id}"}
        )

    # ------------------------------------------------------------------ #
    #  Internal HTTP layer
    # ------------------------------------------------------------------ #

    def _headers(self, *, mutating: bool) -> dict[str, str]:
        headers = {
            HEADER_API_KEY: self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }
        if mutating:
            headers[HEADER_PREFER] = PREFER_RETURN_REPRESENTATION
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """Execute a request against one table.

        Raises:
            AuthenticationError: On 401/403 responses.
            RateLimitError: On 429 responses.
            ApiResponseError: On other non-2xx responses.
            ApiConnectionError: On network errors.
        """
        url = f"{self._rest_url}/{table}"
        kwargs: dict[str, Any] = {
            "headers": self._headers(mutating=method != "GET"),
            "timeout": self._timeout,
        }
        if params:
            kwargs["params"] = params
        if json_body is not None:
            kwargs["json"] = json_body

        try:
            async with self._session.request(method, url, **kwargs) as resp:
                if resp.status in (401, 403):
                    raise AuthenticationError(
                        f"API key rejected: HTTP {resp.status}"
                    )

                if resp.status == 429:
                    raise RateLimitError(
                        retry_after=_retry_after_seconds(
                            resp.headers.get("Retry-After")
                        ),
                    )

                if resp.status == 204:
                    return None

                if resp.status >= 400:
                    body = await resp.text()
                    raise ApiResponseError(
                        f"API error: HTTP {resp.status} - {body}",
                        status_code=resp.status,
                    )

                return await resp.json()

        except aiohttp.ClientError as err:
            raise ApiConnectionError(f"Connection error: {err}") from err
        except TimeoutError as err:
            raise ApiConnectionError("Request timed out") from err


def _single_row(data: Any) -> dict[str, Any]:
    """Unwrap the one-row list PostgREST returns for representation writes."""
    if isinstance(data, list):
        if not data:
            raise ApiResponseError("Write returned no rows")
        return data[0]
    if isinstance(data, dict):
        return data
    raise ApiResponseError(f"Unexpected write response: {data!r}")


def _retry_after_seconds(value: str | None) -> float | None:
    """Read a Retry-After header given as seconds or as an HTTP date."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = dtparse(value)
    except (ValueError, OverflowError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)
