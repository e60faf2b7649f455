"""Failure classification for remote lookups.

Every failed remote call is reduced to one ``FailureCategory``. The category
decides whether the call is retried and how long the failure is remembered by
the negative cache.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator

import httpx

from packages.remote_shared.http import HttpRequestError, HttpStatusError

MAX_CAUSE_DEPTH = 5


class FailureCategory(str, Enum):
    """Closed classification of why a remote call failed."""

    NOT_FOUND = "not_found"
    AUTH_ERROR = "auth_error"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"
    CLIENT_ERROR = "client_error"
    UNKNOWN = "unknown"

    @property
    def is_transient(self) -> bool:
        return self in TRANSIENT_CATEGORIES


TRANSIENT_CATEGORIES = frozenset(
    {
        FailureCategory.RATE_LIMITED,
        FailureCategory.SERVER_ERROR,
        FailureCategory.TIMEOUT,
        FailureCategory.CONNECTION_ERROR,
    }
)


class TransportSignal(str, Enum):
    """Transport-level failure signals that carry no HTTP status."""

    TIMEOUT = "timeout"
    CONNECTION = "connection"


def is_transient(category: FailureCategory) -> bool:
    """Return whether failures in ``category`` may succeed on retry."""
    return category in TRANSIENT_CATEGORIES


def classify_status(status: int) -> FailureCategory:
    """Map one HTTP status code onto a failure category."""
    if status == 404:
        return FailureCategory.NOT_FOUND
    if status in (401, 403):
        return FailureCategory.AUTH_ERROR
    if status == 429:
        return FailureCategory.RATE_LIMITED
    if 500 <= status <= 599:
        return FailureCategory.SERVER_ERROR
    if 400 <= status <= 499:
        return FailureCategory.CLIENT_ERROR
    return FailureCategory.UNKNOWN


def classify_failure(
    signal: int | TransportSignal | BaseException | None,
) -> FailureCategory:
    """Classify an HTTP status, transport signal, or exception. Never raises."""
    if signal is None:
        return FailureCategory.UNKNOWN
    if isinstance(signal, TransportSignal):
        if signal is TransportSignal.TIMEOUT:
            return FailureCategory.TIMEOUT
        return FailureCategory.CONNECTION_ERROR
    if isinstance(signal, bool):
        return FailureCategory.UNKNOWN
    if isinstance(signal, int):
        return classify_status(signal)
    if isinstance(signal, BaseException):
        return _classify_exception(signal)
    return FailureCategory.UNKNOWN


def _classify_exception(exc: BaseException) -> FailureCategory:
    for link in iter_causes(exc):
        carried = getattr(link, "category", None)
        if isinstance(carried, FailureCategory):
            return carried
        transport = transport_signal(link)
        if transport is not None:
            return classify_failure(transport)
        status = _status_of(link)
        if status is not None:
            return classify_status(status)
    return FailureCategory.UNKNOWN


def extract_http_status(exc: BaseException) -> int | None:
    """Return the first 4xx/5xx status found along the cause chain.

    Connection-level failures carry no status, so the walk stops at them.
    """
    for link in iter_causes(exc):
        if transport_signal(link) is not None:
            return None
        status = _status_of(link)
        if status is not None:
            return status
    return None


def iter_causes(
    exc: BaseException, *, max_depth: int = MAX_CAUSE_DEPTH
) -> Iterator[BaseException]:
    """Yield ``exc`` and up to ``max_depth`` chained causes, without cycles."""
    seen: set[int] = set()
    current: BaseException | None = exc
    depth = 0
    while current is not None and depth <= max_depth and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = _next_cause(current)
        depth += 1


def transport_signal(exc: BaseException) -> TransportSignal | None:
    """Return the transport signal carried by one exception, if any."""
    if isinstance(exc, HttpRequestError):
        if exc.timed_out or isinstance(exc.cause, httpx.TimeoutException):
            return TransportSignal.TIMEOUT
        return _connection_signal(exc.cause or exc)
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return TransportSignal.TIMEOUT
    if isinstance(exc, (httpx.TransportError, ConnectionError)):
        return _connection_signal(exc)
    return None


def _connection_signal(exc: BaseException) -> TransportSignal:
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return TransportSignal.TIMEOUT
    if "timed out" in str(exc).lower():
        return TransportSignal.TIMEOUT
    return TransportSignal.CONNECTION


def _status_of(exc: BaseException) -> int | None:
    if hasattr(exc, "remote_status"):
        remote = getattr(exc, "remote_status")
        return remote if isinstance(remote, int) and _is_error_status(remote) else None
    if isinstance(exc, HttpStatusError):
        return exc.status_code if _is_error_status(exc.status_code) else None
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    value = getattr(exc, "status_code", None)
    if isinstance(value, int) and _is_error_status(value):
        return value
    return None


def _is_error_status(value: int) -> bool:
    return 400 <= value <= 599


def _next_cause(exc: BaseException) -> BaseException | None:
    explicit = getattr(exc, "cause", None)
    if isinstance(explicit, BaseException):
        return explicit
    return exc.__cause__ or exc.__context__
