"""Shared fakes for remote repository unit tests."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Mapping, Union

from packages.remote_repository import (
    Document,
    NullRepositoryObserver,
    RemoteRepository,
    RemoteRepositorySettings,
    UuidValidatingRemoteRepository,
)
from packages.remote_shared.http import HttpRequestError, HttpStatusError

BASE_URL = "https://api.example.test"
ORG_A = "3f1c2a4e-8b7d-4c6e-9a1f-0b2c3d4e5f60"
ORG_B = "7a8b9c0d-1e2f-4a3b-8c4d-5e6f7a8b9c0d"
ORG_C = "c0ffee00-1234-4abc-8def-001122334455"

Outcome = Union[Document, BaseException, Callable[[str, Union[Mapping[str, Any], None]], Document]]


class FakeTransport:
    """Scripted ``DocumentTransport`` that records every call."""

    def __init__(self, *outcomes: Outcome, base_url: str = BASE_URL) -> None:
        self._outcomes = list(outcomes)
        self._base_url = base_url
        self.calls: list[dict[str, Any]] = []

    @property
    def base_url(self) -> str:
        return self._base_url

    def queue(self, *outcomes: Outcome) -> None:
        self._outcomes.extend(outcomes)

    def get(self, url: str, headers: Mapping[str, str]) -> Document:
        return self._next("GET", url, None, headers)

    def post(self, url: str, body: Mapping[str, Any], headers: Mapping[str, str]) -> Document:
        return self._next("POST", url, body, headers)

    def _next(
        self,
        method: str,
        url: str,
        body: Mapping[str, Any] | None,
        headers: Mapping[str, str],
    ) -> Document:
        self.calls.append({"method": method, "url": url, "body": body, "headers": dict(headers)})
        if not self._outcomes:
            raise AssertionError(f"unexpected {method} {url}")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome(url, body)
        return outcome


class CountingTokenProvider:
    def __init__(self, token: object = "token-123", *, error: Exception | None = None) -> None:
        self._token = token
        self._error = error
        self.calls = 0

    def get_token(self) -> str:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._token  # type: ignore[return-value]


class RecordingObserver(NullRepositoryObserver):
    """Observer capturing every event by hook name."""

    def __init__(self) -> None:
        self.events: dict[str, list[Any]] = defaultdict(list)

    def on_request_started(self, event: Any) -> None:
        self.events["started"].append(event)

    def on_request_completed(self, event: Any) -> None:
        self.events["completed"].append(event)

    def on_retry(self, event: Any) -> None:
        self.events["retry"].append(event)

    def on_failure_classified(self, event: Any) -> None:
        self.events["failure"].append(event)

    def on_ids_rejected(self, event: Any) -> None:
        self.events["rejected"].append(event)

    def on_negative_cache_hit(self, event: Any) -> None:
        self.events["negative_hit"].append(event)


class RecordingReporter:
    def __init__(self) -> None:
        self.exceptions: list[tuple[BaseException, dict[str, object]]] = []
        self.messages: list[tuple[str, dict[str, object]]] = []

    def capture_exception(
        self, exc: BaseException, *, context: Mapping[str, object] | None = None
    ) -> None:
        self.exceptions.append((exc, dict(context or {})))

    def capture_message(self, message: str, *, context: Mapping[str, object] | None = None) -> None:
        self.messages.append((message, dict(context or {})))


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class OrganisationRepository(RemoteRepository):
    resource_path = "/v1/organisations"
    resource_type = "organisations"


class UuidOrganisationRepository(UuidValidatingRemoteRepository):
    resource_path = "/v1/organisations"


def resource(entity_id: str, **attributes: Any) -> dict[str, Any]:
    return {"type": "organisations", "id": entity_id, "attributes": attributes}


def document(*resources: dict[str, Any], status_code: int = 200) -> Document:
    return Document.from_payload({"data": list(resources)}, status_code=status_code)


def error_document(*errors: dict[str, Any], status_code: int) -> Document:
    return Document.from_payload({"errors": list(errors)}, status_code=status_code)


def timeout_error(url: str = "/v1/organisations") -> HttpRequestError:
    return HttpRequestError(
        message=f"HTTP request failed for GET {url}",
        method="GET",
        url=url,
        timed_out=True,
    )


def status_failure(status_code: int, body: str = "", url: str = "/v1/organisations") -> HttpStatusError:
    return HttpStatusError(
        message=f"HTTP {status_code} for GET {url}",
        method="GET",
        url=url,
        status_code=status_code,
        response_body=body,
    )


def build_repository(
    *outcomes: Outcome,
    repository_cls: type[RemoteRepository] = OrganisationRepository,
    token_provider: CountingTokenProvider | None = None,
    **overrides: Any,
) -> tuple[RemoteRepository, FakeTransport, RecordingObserver, RecordingReporter, list[float]]:
    """Return a repository wired to fakes plus the fakes themselves."""
    settings_values: dict[str, Any] = {"base_uri": BASE_URL, "retry_backoff_seconds": 0.5}
    settings_values.update(overrides.pop("settings", {}))
    transport = FakeTransport(*outcomes)
    observer = RecordingObserver()
    reporter = RecordingReporter()
    sleeps: list[float] = []
    repository = repository_cls(
        token_provider=token_provider or CountingTokenProvider(),
        settings=RemoteRepositorySettings(**settings_values),
        transport=transport,
        observer=observer,
        error_reporter=reporter,
        sleep=sleeps.append,
        **overrides,
    )
    return repository, transport, observer, reporter, sleeps
