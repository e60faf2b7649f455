"""Structured observability side channel for remote repositories.

Repositories report lifecycle events to one ``RepositoryObserver``. The
logging observer is always installed; the profiling observer is added when
profiling is enabled. Observer failures are logged and never interrupt the
remote call being observed.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol, runtime_checkable

from packages.remote_shared.logging import fields, get_logger, log_context

from .errors import FailureKind
from .failures import FailureCategory

_LOGGER = get_logger(__name__)


class RequestOutcome(str, Enum):
    SUCCESS = "success"
    DEGRADED = "degraded"
    FAILURE = "failure"


@dataclass(frozen=True)
class RequestStarted:
    repository: str
    method: str
    endpoint: str


@dataclass(frozen=True)
class RequestCompleted:
    repository: str
    method: str
    endpoint: str
    outcome: RequestOutcome
    duration_ms: float
    attempts: int
    status_code: int | None = None
    category: FailureCategory | None = None


@dataclass(frozen=True)
class RetryScheduled:
    """One retry about to happen; ``attempt`` counts retries from 1."""

    repository: str
    method: str
    endpoint: str
    attempt: int
    category: FailureCategory
    backoff_seconds: float
    error: str


@dataclass(frozen=True)
class FailureClassified:
    repository: str
    method: str
    endpoint: str
    category: FailureCategory
    kind: FailureKind
    status_code: int | None
    message: str


@dataclass(frozen=True)
class IdsRejected:
    repository: str
    invalid_ids: tuple[str, ...]
    valid_count: int
    total_count: int


@dataclass(frozen=True)
class NegativeCacheHit:
    repository: str
    entity_id: str
    category: FailureCategory
    expires_in_seconds: float


@runtime_checkable
class RepositoryObserver(Protocol):
    """Hook contract for repository lifecycle events."""

    def on_request_started(self, event: RequestStarted) -> None:
        """Handle the start of one remote call."""

    def on_request_completed(self, event: RequestCompleted) -> None:
        """Handle the end of one remote call, whatever its outcome."""

    def on_retry(self, event: RetryScheduled) -> None:
        """Handle one scheduled retry."""

    def on_failure_classified(self, event: FailureClassified) -> None:
        """Handle one classified failure."""

    def on_ids_rejected(self, event: IdsRejected) -> None:
        """Handle identifiers dropped before any remote call."""

    def on_negative_cache_hit(self, event: NegativeCacheHit) -> None:
        """Handle one identifier skipped because of a cached failure."""


class NullRepositoryObserver:
    """Observer that ignores every event; convenient base for partial observers."""

    def on_request_started(self, event: RequestStarted) -> None:
        return None

    def on_request_completed(self, event: RequestCompleted) -> None:
        return None

    def on_retry(self, event: RetryScheduled) -> None:
        return None

    def on_failure_classified(self, event: FailureClassified) -> None:
        return None

    def on_ids_rejected(self, event: IdsRejected) -> None:
        return None

    def on_negative_cache_hit(self, event: NegativeCacheHit) -> None:
        return None


class LoggingRepositoryObserver(NullRepositoryObserver):
    """Emit one structured log line per repository event."""

    def __init__(self, *, logger=None) -> None:
        self._logger = logger or _LOGGER

    def on_request_started(self, event: RequestStarted) -> None:
        with log_context(
            {
                fields.EVENT: fields.REQUEST_STARTED_EVENT,
                fields.REPOSITORY: event.repository,
                fields.API_METHOD: event.method,
                fields.API_ENDPOINT: event.endpoint,
            }
        ):
            self._logger.debug("Remote request started")

    def on_request_completed(self, event: RequestCompleted) -> None:
        with log_context(
            {
                fields.EVENT: fields.REQUEST_COMPLETED_EVENT,
                fields.REPOSITORY: event.repository,
                fields.API_METHOD: event.method,
                fields.API_ENDPOINT: event.endpoint,
                fields.OUTCOME: event.outcome.value,
                fields.DURATION_MS: round(event.duration_ms, 3),
                fields.API_RETRY_COUNT: max(event.attempts - 1, 0),
                fields.API_STATUS: event.status_code,
                fields.FAILURE_CATEGORY: event.category.value if event.category else None,
            }
        ):
            if event.outcome is RequestOutcome.FAILURE:
                self._logger.warning("Remote request completed")
            else:
                self._logger.info("Remote request completed")

    def on_retry(self, event: RetryScheduled) -> None:
        with log_context(
            {
                fields.EVENT: fields.REQUEST_RETRY_EVENT,
                fields.REPOSITORY: event.repository,
                fields.API_METHOD: event.method,
                fields.API_ENDPOINT: event.endpoint,
                fields.RETRY_ATTEMPT: event.attempt,
                fields.FAILURE_CATEGORY: event.category.value,
                fields.BACKOFF_SECONDS: event.backoff_seconds,
                fields.ERROR_MESSAGE: event.error,
            }
        ):
            self._logger.warning("Retrying remote request")

    def on_failure_classified(self, event: FailureClassified) -> None:
        with log_context(
            {
                fields.EVENT: fields.FAILURE_CLASSIFIED_EVENT,
                fields.REPOSITORY: event.repository,
                fields.API_METHOD: event.method,
                fields.API_ENDPOINT: event.endpoint,
                fields.FAILURE_CATEGORY: event.category.value,
                fields.ERROR_TYPE: event.kind.value,
                fields.API_STATUS: event.status_code,
                fields.ERROR_MESSAGE: event.message,
            }
        ):
            self._logger.error("Error calling remote service")

    def on_ids_rejected(self, event: IdsRejected) -> None:
        with log_context(
            {
                fields.EVENT: fields.IDS_REJECTED_EVENT,
                fields.REPOSITORY: event.repository,
                fields.INVALID_COUNT: len(event.invalid_ids),
                fields.VALID_COUNT: event.valid_count,
                fields.TOTAL_COUNT: event.total_count,
                fields.INVALID_IDS: list(event.invalid_ids),
            }
        ):
            self._logger.warning("Invalid UUIDs filtered from remote repository query")

    def on_negative_cache_hit(self, event: NegativeCacheHit) -> None:
        with log_context(
            {
                fields.EVENT: fields.NEGATIVE_CACHE_HIT_EVENT,
                fields.REPOSITORY: event.repository,
                fields.IDENTIFIERS: [event.entity_id],
                fields.FAILURE_CATEGORY: event.category.value,
                fields.CACHE_TTL: round(event.expires_in_seconds, 3),
            }
        ):
            self._logger.debug("Skipping lookup with cached failure")


class ProfilingObserver(NullRepositoryObserver):
    """Accumulate per-method call counts and durations."""

    def __init__(self) -> None:
        self._calls: dict[str, int] = defaultdict(int)
        self._seconds: dict[str, float] = defaultdict(float)

    def on_request_completed(self, event: RequestCompleted) -> None:
        key = f"{event.repository}::{event.method.lower()}"
        self._calls[key] += 1
        self._seconds[key] += event.duration_ms / 1000.0

    def timings(self) -> dict[str, dict[str, float]]:
        """Return ``{method: {"calls": n, "total_seconds": s}}``."""
        return {
            key: {"calls": self._calls[key], "total_seconds": round(self._seconds[key], 6)}
            for key in self._calls
        }

    def total_seconds(self) -> float:
        return sum(self._seconds.values())

    def log_report(self, *, logger=None) -> None:
        """Log accumulated timings once; does nothing when no call was made."""
        if not self._calls:
            return
        with log_context(
            {
                fields.EVENT: fields.TIMING_EVENT,
                "total_seconds": round(self.total_seconds(), 6),
                "calls": sum(self._calls.values()),
                "breakdown": self.timings(),
            }
        ):
            (logger or _LOGGER).info("Remote repository timing")


class CompositeRepositoryObserver:
    """Fan events out to several observers, isolating observer failures."""

    def __init__(self, observers: Iterable[RepositoryObserver]) -> None:
        self._observers = tuple(observers)

    @property
    def observers(self) -> tuple[RepositoryObserver, ...]:
        return self._observers

    def on_request_started(self, event: RequestStarted) -> None:
        self._fan_out("on_request_started", event)

    def on_request_completed(self, event: RequestCompleted) -> None:
        self._fan_out("on_request_completed", event)

    def on_retry(self, event: RetryScheduled) -> None:
        self._fan_out("on_retry", event)

    def on_failure_classified(self, event: FailureClassified) -> None:
        self._fan_out("on_failure_classified", event)

    def on_ids_rejected(self, event: IdsRejected) -> None:
        self._fan_out("on_ids_rejected", event)

    def on_negative_cache_hit(self, event: NegativeCacheHit) -> None:
        self._fan_out("on_negative_cache_hit", event)

    def _fan_out(self, hook: str, event: object) -> None:
        for observer in self._observers:
            try:
                getattr(observer, hook)(event)
            except Exception as exc:
                with log_context(
                    {
                        fields.EVENT: hook,
                        "observer": type(observer).__name__,
                        fields.ERRORS: [f"{type(exc).__name__}: {exc}"],
                    }
                ):
                    _LOGGER.warning("Repository observer failed")
