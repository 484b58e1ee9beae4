"""Tests for coordinator helpers."""

from __future__ import annotations

from homekeeper_api import ApiResponseError, RateLimitError

from custom_components.homekeeper.coordinator import _rate_limit_message


class TestRateLimitMessage:
    def test_includes_server_hint(self):
        assert _rate_limit_message(RateLimitError(retry_after=30.0)) == (
            "Rate limited by backend, retry after 30s"
        )

    def test_without_hint(self):
        assert _rate_limit_message(RateLimitError()) == "Rate limited by backend"

    def test_rate_limit_is_a_response_error(self):
        err = RateLimitError(retry_after=1.5)
        assert isinstance(err, ApiResponseError)
        assert err.status_code == 429
        assert str(err) == "Rate limited, retry after 1.5s"
