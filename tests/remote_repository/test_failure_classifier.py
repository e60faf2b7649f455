"""Tests for mapping statuses, transport signals, and exceptions to categories."""

from __future__ import annotations

import httpx
import pytest

from packages.remote_repository import (
    TRANSIENT_CATEGORIES,
    FailureCategory,
    FailureKind,
    RemoteServiceFailure,
    TransportSignal,
    classify_failure,
    extract_http_status,
    is_transient,
)
from packages.remote_shared.http import HttpRequestError
from tests.remote_repository.repository_helpers import status_failure, timeout_error


@pytest.mark.parametrize(
    ("status", "category"),
    [
        (404, FailureCategory.NOT_FOUND),
        (401, FailureCategory.AUTH_ERROR),
        (403, FailureCategory.AUTH_ERROR),
        (429, FailureCategory.RATE_LIMITED),
        (500, FailureCategory.SERVER_ERROR),
        (503, FailureCategory.SERVER_ERROR),
        (599, FailureCategory.SERVER_ERROR),
        (400, FailureCategory.CLIENT_ERROR),
        (409, FailureCategory.CLIENT_ERROR),
        (422, FailureCategory.CLIENT_ERROR),
        (200, FailureCategory.UNKNOWN),
        (302, FailureCategory.UNKNOWN),
        (600, FailureCategory.UNKNOWN),
    ],
)
def test_classify_failure_maps_http_statuses(status: int, category: FailureCategory) -> None:
    """Each status should land in exactly one category."""
    assert classify_failure(status) is category


def test_classify_failure_handles_signals_and_missing_input() -> None:
    """Transport signals map directly; absent or odd input is unknown."""
    assert classify_failure(TransportSignal.TIMEOUT) is FailureCategory.TIMEOUT
    assert classify_failure(TransportSignal.CONNECTION) is FailureCategory.CONNECTION_ERROR
    assert classify_failure(None) is FailureCategory.UNKNOWN
    assert classify_failure(True) is FailureCategory.UNKNOWN


@pytest.mark.parametrize(
    ("exc", "category"),
    [
        (timeout_error(), FailureCategory.TIMEOUT),
        (httpx.ReadTimeout("read timed out"), FailureCategory.TIMEOUT),
        (httpx.ConnectError("connection refused"), FailureCategory.CONNECTION_ERROR),
        (TimeoutError(), FailureCategory.TIMEOUT),
        (ConnectionError("Connection timed out"), FailureCategory.TIMEOUT),
        (ConnectionResetError("reset by peer"), FailureCategory.CONNECTION_ERROR),
        (status_failure(503), FailureCategory.SERVER_ERROR),
        (status_failure(404), FailureCategory.NOT_FOUND),
        (ValueError("unrelated"), FailureCategory.UNKNOWN),
    ],
)
def test_classify_failure_inspects_exceptions(
    exc: BaseException, category: FailureCategory
) -> None:
    """Exceptions should classify by transport signal first, then by status."""
    assert classify_failure(exc) is category


def test_wrapped_connect_error_is_a_connection_failure() -> None:
    """HttpRequestError wrapping a non-timeout error should be a connection failure."""
    exc = HttpRequestError(
        message="HTTP request failed for GET /v1/x",
        method="GET",
        url="/v1/x",
        cause=httpx.ConnectError("connection refused"),
    )
    assert classify_failure(exc) is FailureCategory.CONNECTION_ERROR


def test_classify_failure_walks_cause_chain() -> None:
    """A status carried by a chained cause should classify the outer exception."""
    try:
        try:
            raise status_failure(429)
        except Exception as inner:
            raise RuntimeError("wrapped") from inner
    except RuntimeError as outer:
        assert classify_failure(outer) is FailureCategory.RATE_LIMITED
        assert extract_http_status(outer) == 429


def test_carried_category_is_honoured() -> None:
    """A failure that already carries a category should not be reclassified."""
    failure = RemoteServiceFailure(
        message="Remote service error (404): missing",
        category=FailureCategory.NOT_FOUND,
        kind=FailureKind.STRUCTURED,
        status_code=404,
        remote_status=404,
    )
    assert classify_failure(failure) is FailureCategory.NOT_FOUND
    assert extract_http_status(failure) == 404


def test_extract_http_status_stops_at_transport_failures() -> None:
    """Timeouts and connection failures carry no HTTP status."""
    assert extract_http_status(timeout_error()) is None
    assert extract_http_status(httpx.ConnectError("refused")) is None
    assert extract_http_status(ValueError("plain")) is None


def test_extract_http_status_ignores_non_error_status_attributes() -> None:
    """Only 4xx and 5xx statuses count as HTTP failure statuses."""

    class _Redirect(Exception):
        status_code = 302

    assert extract_http_status(_Redirect()) is None


def test_cause_chain_walk_is_bounded() -> None:
    """Causes deeper than the walk limit should not be inspected."""

    def chain(depth: int) -> BaseException:
        current: BaseException = status_failure(404)
        for index in range(depth):
            wrapper = RuntimeError(f"wrapper {index}")
            wrapper.__cause__ = current
            current = wrapper
        return current

    assert extract_http_status(chain(5)) == 404
    assert extract_http_status(chain(6)) is None


def test_cyclic_cause_chain_terminates() -> None:
    """A cause cycle should not loop forever."""
    first = RuntimeError("first")
    second = RuntimeError("second")
    first.__cause__ = second
    second.__cause__ = first

    assert classify_failure(first) is FailureCategory.UNKNOWN


def test_transient_categories() -> None:
    """Only rate limits, server errors, timeouts, and connection errors are transient."""
    assert TRANSIENT_CATEGORIES == {
        FailureCategory.RATE_LIMITED,
        FailureCategory.SERVER_ERROR,
        FailureCategory.TIMEOUT,
        FailureCategory.CONNECTION_ERROR,
    }
    for category in FailureCategory:
        assert is_transient(category) is (category in TRANSIENT_CATEGORIES)
        assert category.is_transient is is_transient(category)
