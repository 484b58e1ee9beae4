"""Errors raised by the HomeKeeper backend client.

Callers generally only need to tell three cases apart: the key was
rejected (ask the user for a new one), the backend could not be reached
(try again later), or the backend answered with an error.
"""

from __future__ import annotations


class HomeKeeperError(Exception):
    """Base class for client errors."""


class AuthenticationError(HomeKeeperError):
    """The API key was rejected (HTTP 401 or 403)."""


class ApiConnectionError(HomeKeeperError):
    """No response: DNS failure, refused connection or timeout."""


class ApiResponseError(HomeKeeperError):
    """PostgREST answered with an error status.

    ``status_code`` is None when the body, not the status, was wrong
    (for example a write that returned no rows).
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ApiResponseError):
    """HTTP 429. ``retry_after`` holds the server's wait hint in seconds."""

    def __init__(self, retry_after: float | None = None) -> None:
        message = "Rate limited"
        if retry_after is not None:
            message = f"Rate limited, retry after {retry_after:g}s"
        super().__init__(message, status_code=429)
        self.retry_after = retry_after
