"""Unit tests for the shared retry helper."""

from unittest.mock import call, patch

import httpx
import pytest

from formable_wiki.lookup.http import RETRYABLE_STATUS, LookupUnavailableError, request_with_retry

URL = "https://example.test/resource"


class CountingHandler:
    """MockTransport handler replaying a scripted sequence of outcomes."""

    def __init__(self, *outcomes: int | Exception) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        outcome = self.outcomes[min(self.calls, len(self.outcomes) - 1)]
        self.calls += 1
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, json={"ok": outcome == 200})


class TestRequestWithRetry:
    """Tests for request_with_retry()."""

    @pytest.mark.unit
    def test_success_first_try(self, mock_client) -> None:
        """Should return the first successful response without sleeping."""
        handler = CountingHandler(200)
        with patch("formable_wiki.lookup.http.time.sleep") as mock_sleep:
            response = request_with_retry(mock_client(handler), "GET", URL)

        assert response.status_code == 200
        assert handler.calls == 1
        mock_sleep.assert_not_called()

    @pytest.mark.unit
    def test_server_error_retried(self, mock_client) -> None:
        """Should retry a 503 and return the following success."""
        handler = CountingHandler(503, 200)
        with patch("formable_wiki.lookup.http.time.sleep") as mock_sleep:
            response = request_with_retry(mock_client(handler), "GET", URL, retry_delay=0.5)

        assert response.status_code == 200
        assert handler.calls == 2
        mock_sleep.assert_called_once_with(0.5)

    @pytest.mark.unit
    def test_rate_limit_retried(self, mock_client) -> None:
        """Should treat 429 as transient."""
        handler = CountingHandler(429, 200)
        with patch("formable_wiki.lookup.http.time.sleep"):
            response = request_with_retry(mock_client(handler), "GET", URL)

        assert response.status_code == 200

    @pytest.mark.unit
    @pytest.mark.parametrize("status", [501, 505, 599])
    def test_any_server_error_retried(self, mock_client, status: int) -> None:
        """Should retry every 5xx status, not only the common gateway ones."""
        handler = CountingHandler(status, 200)
        with patch("formable_wiki.lookup.http.time.sleep"):
            response = request_with_retry(mock_client(handler), "GET", URL)

        assert response.status_code == 200
        assert handler.calls == 2

    @pytest.mark.unit
    def test_retryable_status_set(self) -> None:
        """Should list only the statuses below 500 that are retried."""
        assert RETRYABLE_STATUS == frozenset({429})

    @pytest.mark.unit
    def test_client_error_is_final(self, mock_client) -> None:
        """Should return a 404 without retrying."""
        handler = CountingHandler(404, 200)
        with patch("formable_wiki.lookup.http.time.sleep") as mock_sleep:
            response = request_with_retry(mock_client(handler), "GET", URL)

        assert response.status_code == 404
        assert handler.calls == 1
        mock_sleep.assert_not_called()

    @pytest.mark.unit
    def test_transport_error_exhausts_attempts(self, mock_client) -> None:
        """Should raise after every attempt failed to connect."""
        handler = CountingHandler(httpx.ConnectError("connection refused"))
        with (
            patch("formable_wiki.lookup.http.time.sleep"),
            pytest.raises(LookupUnavailableError, match="after 2 attempts"),
        ):
            request_with_retry(mock_client(handler), "GET", URL, max_attempts=2)

        assert handler.calls == 2

    @pytest.mark.unit
    def test_exponential_backoff(self, mock_client) -> None:
        """Should double the delay after each failed attempt."""
        handler = CountingHandler(500)
        with (
            patch("formable_wiki.lookup.http.time.sleep") as mock_sleep,
            pytest.raises(LookupUnavailableError, match="HTTP 500"),
        ):
            request_with_retry(mock_client(handler), "GET", URL, max_attempts=3, retry_delay=1.0)

        assert mock_sleep.call_args_list == [call(1.0), call(2.0)]
        assert handler.calls == 3

    @pytest.mark.unit
    def test_lookup_unavailable_is_lookup_error(self) -> None:
        """Should be catchable as LookupError."""
        assert issubclass(LookupUnavailableError, LookupError)
