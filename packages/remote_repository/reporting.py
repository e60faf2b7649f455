"""Error-reporting sinks for remote repository failures."""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol, runtime_checkable

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from packages.remote_shared.logging import fields, get_logger, log_context

_LOGGER = get_logger(__name__)


@runtime_checkable
class ErrorReporter(Protocol):
    """Sink for exceptional conditions worth operational attention."""

    def capture_exception(
        self, exc: BaseException, *, context: Mapping[str, object] | None = None
    ) -> None:
        """Report one exception."""

    def capture_message(
        self, message: str, *, context: Mapping[str, object] | None = None
    ) -> None:
        """Report one message that is not backed by an exception."""


class LoggingErrorReporter:
    """Report errors as structured log records.

    Tracebacks are attached only when ``include_stack_trace`` is enabled.
    """

    def __init__(self, *, include_stack_trace: bool = False, logger=None) -> None:
        self._include_stack_trace = include_stack_trace
        self._logger = logger or _LOGGER

    def capture_exception(
        self, exc: BaseException, *, context: Mapping[str, object] | None = None
    ) -> None:
        payload = dict(context or {})
        payload[fields.ERROR_TYPE] = type(exc).__name__
        payload[fields.ERROR_MESSAGE] = str(exc)
        with log_context(payload):
            self._logger.error(
                "Remote repository exception",
                exc_info=exc if self._include_stack_trace else None,
            )

    def capture_message(
        self, message: str, *, context: Mapping[str, object] | None = None
    ) -> None:
        payload = dict(context or {})
        payload[fields.ERROR_MESSAGE] = message
        with log_context(payload):
            self._logger.error("Remote repository error message")


class TracingErrorReporter:
    """Record errors on the current OpenTelemetry span."""

    def __init__(self, *, tracer_name: str = "remote_repository") -> None:
        self._tracer_name = tracer_name

    def capture_exception(
        self, exc: BaseException, *, context: Mapping[str, object] | None = None
    ) -> None:
        span = trace.get_current_span()
        if not span.is_recording():
            return
        span.record_exception(exc, attributes=_span_attributes(context))
        span.set_status(Status(StatusCode.ERROR, str(exc)))

    def capture_message(
        self, message: str, *, context: Mapping[str, object] | None = None
    ) -> None:
        span = trace.get_current_span()
        if not span.is_recording():
            return
        attributes = _span_attributes(context)
        attributes[fields.ERROR_MESSAGE] = message
        span.add_event("remote_repository.error", attributes=attributes)


class CompositeErrorReporter:
    """Forward every report to each wrapped reporter in order."""

    def __init__(self, reporters: Iterable[ErrorReporter]) -> None:
        self._reporters = tuple(reporters)

    def capture_exception(
        self, exc: BaseException, *, context: Mapping[str, object] | None = None
    ) -> None:
        for reporter in self._reporters:
            reporter.capture_exception(exc, context=context)

    def capture_message(
        self, message: str, *, context: Mapping[str, object] | None = None
    ) -> None:
        for reporter in self._reporters:
            reporter.capture_message(message, context=context)


def default_error_reporter(*, include_stack_trace: bool = False) -> ErrorReporter:
    """Build the logging + tracing reporter used when none is supplied."""
    return CompositeErrorReporter(
        (
            LoggingErrorReporter(include_stack_trace=include_stack_trace),
            TracingErrorReporter(),
        )
    )


def _span_attributes(context: Mapping[str, object] | None) -> dict[str, str | int | float | bool]:
    attributes: dict[str, str | int | float | bool] = {}
    for key, value in (context or {}).items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            attributes[key] = value
        else:
            attributes[key] = str(value)
    return attributes
