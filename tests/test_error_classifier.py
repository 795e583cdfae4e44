"""Tests for retry classification of Doppler API errors.

Tests cover:
- is_retriable_status(): rate limits, informational, 5xx by content type
- should_retry(): API vs transport kinds and foreign exception types
"""

import copy
import pickle

import httpx
import pytest

from secrets_fetch.core.errors import (
    DopplerApiError,
    ErrorKind,
    is_retriable_status,
    should_retry,
)


def api_error(status_code: int, content_type: str | None = "text/html") -> DopplerApiError:
    return DopplerApiError.from_response(
        "Doppler API Error: boom", status_code=status_code, content_type=content_type
    )


# =============================================================================
# is_retriable_status() Tests
# =============================================================================


class TestIsRetriableStatus:
    """Tests for the status/content-type retry policy."""

    @pytest.mark.parametrize("content_type", ["application/json", "text/html", None])
    def test_rate_limit_always_retried(self, content_type: str | None) -> None:
        assert is_retriable_status(429, content_type)

    @pytest.mark.parametrize("status_code", [100, 101, 103, 150, 198])
    def test_informational_retried(self, status_code: int) -> None:
        assert is_retriable_status(status_code, "application/json")

    def test_199_not_retried(self) -> None:
        """The informational range is half-open at 199."""
        assert not is_retriable_status(199, "text/plain")

    @pytest.mark.parametrize("status_code", [500, 502, 503, 504, 599])
    @pytest.mark.parametrize("content_type", ["text/html", "text/plain; charset=utf-8", "", None])
    def test_non_json_server_errors_retried(
        self, status_code: int, content_type: str | None
    ) -> None:
        assert is_retriable_status(status_code, content_type)

    @pytest.mark.parametrize("status_code", [500, 503, 599])
    @pytest.mark.parametrize(
        "content_type", ["application/json", "application/json; charset=utf-8"]
    )
    def test_json_server_errors_not_retried(self, status_code: int, content_type: str) -> None:
        """A JSON body means the API chose to fail; retrying will not help."""
        assert not is_retriable_status(status_code, content_type)

    @pytest.mark.parametrize("status_code", [200, 204, 301, 400, 401, 403, 404, 409, 422, 499, 600])
    def test_other_statuses_not_retried(self, status_code: int) -> None:
        assert not is_retriable_status(status_code, "text/html")

    def test_missing_status_not_retried(self) -> None:
        assert not is_retriable_status(None, None)


# =============================================================================
# should_retry() Tests
# =============================================================================


class TestShouldRetry:
    """Tests for should_retry() on error values."""

    def test_retriable_api_error(self) -> None:
        assert should_retry(api_error(429, "application/json"))

    def test_non_json_503(self) -> None:
        assert should_retry(api_error(503, "text/html"))

    def test_json_500(self) -> None:
        assert not should_retry(api_error(500, "application/json"))

    def test_client_error(self) -> None:
        assert not should_retry(api_error(404, "application/json"))

    def test_transport_error_not_retried(self) -> None:
        error = DopplerApiError.transport("Doppler API Error: ConnectError: refused")
        assert error.kind is ErrorKind.TRANSPORT
        assert not should_retry(error)

    @pytest.mark.parametrize(
        "error",
        [
            ConnectionRefusedError("refused"),
            httpx.ConnectError("refused"),
            ValueError("bad json"),
            RuntimeError("boom"),
        ],
        ids=["connection-refused", "httpx-connect", "value-error", "runtime-error"],
    )
    def test_foreign_errors_not_retried(self, error: Exception) -> None:
        assert not should_retry(error)

    def test_foreign_error_with_status_attribute_not_retried(self) -> None:
        """Only DopplerApiError fields are trusted, not look-alike attributes."""
        error = RuntimeError("upstream")
        error.status_code = 503  # type: ignore[attr-defined]
        assert not should_retry(error)


class TestDopplerApiError:
    """Tests for the DopplerApiError value object."""

    def test_carries_response_fields(self) -> None:
        error = api_error(503, "text/html")
        assert error.kind is ErrorKind.API
        assert error.status_code == 503
        assert error.content_type == "text/html"
        assert str(error) == "Doppler API Error: boom"
        assert not error.is_transport

    def test_transport_has_no_status(self) -> None:
        error = DopplerApiError.transport("Doppler API Error: timeout")
        assert error.status_code is None
        assert error.content_type is None
        assert error.is_transport

    def test_fields_are_read_only(self) -> None:
        error = api_error(429)
        with pytest.raises(AttributeError):
            error.status_code = 200  # type: ignore[misc]

    def test_can_be_raised_and_chained(self) -> None:
        cause = httpx.ConnectError("refused")
        with pytest.raises(DopplerApiError) as exc_info:
            try:
                raise cause
            except httpx.ConnectError as e:
                raise DopplerApiError.transport(f"Doppler API Error: {e}") from e
        assert exc_info.value.__cause__ is cause

    def test_pickle_keeps_fields(self) -> None:
        error = api_error(503, "text/html")

        restored = pickle.loads(pickle.dumps(error))

        assert type(restored) is DopplerApiError
        assert restored.kind is ErrorKind.API
        assert restored.status_code == 503
        assert restored.content_type == "text/html"
        assert str(restored) == "Doppler API Error: boom"
        assert should_retry(restored)

    def test_copy_keeps_kind(self) -> None:
        error = DopplerApiError.transport("Doppler API Error: ConnectError: refused")

        copied = copy.copy(error)

        assert copied.is_transport
        assert copied.message == error.message
        assert not should_retry(copied)
