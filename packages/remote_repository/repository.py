"""Remote repository orchestrator.

A ``RemoteRepository`` fetches entities by id from one JSON:API resource. It
composes a positive cache (entities already fetched), a negative cache
(recent failures by id), a document transport, and an error normalizer, and
applies one retry/classify/report discipline to every remote call.

Instances are meant to live for one unit of work. Neither cache is shared or
locked.
"""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Iterable, Mapping, cast

import httpx

from packages.remote_shared.config import RuntimeSettings
from packages.remote_shared.errors import ErrorCollection, ErrorCollectionParser, ErrorDataNormalizer
from packages.remote_shared.http import HttpRequestError, HttpStatusError
from packages.remote_shared.logging import fields, get_logger, log_context, redact_headers

from .config import COMPONENT_ID, RemoteRepositorySettings, resolve_remote_repository_settings
from .credentials import BearerCredential, TokenProvider
from .document import DegradedResult, Document, Entity, make_request_body
from .errors import (
    DEFAULT_FAILURE_STATUS,
    TRANSPORT_FAILURE_STATUS,
    DocumentParseError,
    FailureKind,
    RemoteRepositoryConfigurationError,
    RemoteServiceFailure,
)
from .failures import FailureCategory, classify_failure, classify_status, extract_http_status
from .negative_cache import NegativeCache, NegativeCacheEntry, NegativeCacheTtlPolicy, lookup_key
from .observability import (
    CompositeRepositoryObserver,
    FailureClassified,
    LoggingRepositoryObserver,
    NegativeCacheHit,
    ProfilingObserver,
    RepositoryObserver,
    RequestCompleted,
    RequestOutcome,
    RequestStarted,
    RetryScheduled,
)
from .positive_cache import PositiveCache
from .reporting import ErrorReporter, default_error_reporter
from .transport import DocumentTransport, HttpDocumentTransport
from .url_guard import allowed_get_request, is_valid_url_path

_LOGGER = get_logger(__name__)

TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    HttpRequestError,
    HttpStatusError,
    httpx.TransportError,
    TimeoutError,
    ConnectionError,
)
ID_LOOKUP = "id"
INVALID_FORMAT_MESSAGE = "Remote service returned invalid response format"
SEE_LOGS_MESSAGE = "Remote service error - see logs for details"
BASE_URI_KEYS = (
    f"components.{COMPONENT_ID}.base_uri",
    f"REMOTE_COMPONENTS__{COMPONENT_ID.upper()}__BASE_URI",
)

HeaderResolver = Callable[[], str | None]


@dataclass
class _CallTracker:
    method: str
    endpoint: str
    started_at: float
    attempts: int = 0


class RemoteRepository(ABC):
    """Base class for repositories backed by one remote JSON:API resource.

    Subclasses declare ``resource_path`` (for example ``"/v1/organisations"``)
    and may override ``id_filter_param`` when the service filters ids with a
    different query parameter.
    """

    id_filter_param: ClassVar[str] = "filter[id]"
    resource_type: ClassVar[str] = ""

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        settings: RemoteRepositorySettings | None = None,
        transport: DocumentTransport | None = None,
        observer: RepositoryObserver | None = None,
        error_reporter: ErrorReporter | None = None,
        positive_cache: PositiveCache | None = None,
        negative_cache: NegativeCache | None = None,
        forwarded_headers: Mapping[str, str] | None = None,
        header_resolvers: Mapping[str, HeaderResolver | None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._settings = settings or RemoteRepositorySettings()
        self._credential = BearerCredential(token_provider)

        base_uri = self._settings.base_uri or (
            transport.base_url.rstrip("/") if transport is not None else ""
        )
        if base_uri == "":
            raise RemoteRepositoryConfigurationError(
                message=(
                    f"{type(self).__name__} requires a base URI; checked "
                    + ", ".join(BASE_URI_KEYS)
                ),
                checked_keys=BASE_URI_KEYS,
            )
        self._base_uri = base_uri

        self._owns_transport = transport is None
        self._transport: DocumentTransport = transport or HttpDocumentTransport(
            base_url=base_uri,
            timeout_seconds=self._settings.timeout_seconds,
        )

        normalizer = ErrorDataNormalizer(
            include_stack_trace=self._settings.include_stack_trace_in_errors,
            legacy_bool_coercion=self._settings.legacy_bool_coercion,
        )
        self._error_parser = ErrorCollectionParser(normalizer)
        self._positive_cache = positive_cache if positive_cache is not None else PositiveCache()
        self._negative_cache = (
            negative_cache
            if negative_cache is not None
            else NegativeCache(
                ttl_policy=NegativeCacheTtlPolicy(
                    default_ttl_seconds=self._settings.negative_cache_default_ttl_seconds,
                    ttl_by_category=self._settings.negative_cache_ttl_by_category,
                )
            )
        )

        self._profiler = ProfilingObserver() if self._settings.enable_profiling else None
        observers: list[RepositoryObserver] = [LoggingRepositoryObserver()]
        if self._profiler is not None:
            observers.append(self._profiler)
        if observer is not None:
            observers.append(observer)
        self._observer = CompositeRepositoryObserver(observers)

        self._reporter = error_reporter or default_error_reporter(
            include_stack_trace=self._settings.include_stack_trace_in_errors
        )
        self._forwarded_headers = dict(forwarded_headers or {})
        self._header_resolvers = _checked_resolvers(header_resolvers or {})
        self._recoverable_error_patterns = list(self._settings.recoverable_error_patterns)
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_runtime_settings(
        cls,
        runtime_settings: RuntimeSettings,
        *,
        token_provider: TokenProvider,
        **kwargs: Any,
    ) -> RemoteRepository:
        """Build a repository from ``components.remote_repository`` settings."""
        return cls(
            token_provider=token_provider,
            settings=resolve_remote_repository_settings(runtime_settings),
            **kwargs,
        )

    @property
    @abstractmethod
    def resource_path(self) -> str:
        """Return the collection path queried by ``find_by_ids``."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def base_uri(self) -> str:
        return self._base_uri

    @property
    def settings(self) -> RemoteRepositorySettings:
        return self._settings

    @property
    def positive_cache(self) -> PositiveCache:
        return self._positive_cache

    @property
    def negative_cache(self) -> NegativeCache:
        return self._negative_cache

    @property
    def profiler(self) -> ProfilingObserver | None:
        return self._profiler

    @property
    def recoverable_error_patterns(self) -> list[str]:
        return list(self._recoverable_error_patterns)

    @recoverable_error_patterns.setter
    def recoverable_error_patterns(self, patterns: Iterable[str]) -> None:
        self._recoverable_error_patterns = [pattern for pattern in patterns if pattern != ""]

    def close(self) -> None:
        """Log profiling timings and close the transport when owned."""
        if self._profiler is not None:
            self._profiler.log_report()
        if self._owns_transport:
            close = getattr(self._transport, "close", None)
            if callable(close):
                close()

    def __enter__(self) -> RemoteRepository:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    # Entity lookups.

    def find_by_ids(self, ids: Iterable[str]) -> dict[str, Entity]:
        """Return the requested entities that could be resolved, in request order.

        Ids rejected by validation, held by the negative cache, or absent from
        a successful response are omitted. Classified failures raise
        ``RemoteServiceFailure`` after the ids of the failing request have been
        recorded in the negative cache.
        """
        requested = self.screen_ids(_unique_ids(ids))
        remaining = [
            entity_id
            for entity_id in requested
            if not self._positive_cache.has(entity_id)
            and not self._held_by_negative_cache(entity_id)
        ]
        if remaining:
            self._fetch(remaining)
        return self._positive_cache.only(requested)

    def find_by_id(self, entity_id: str) -> Entity | None:
        """Return one entity, or ``None`` when it is absent or not found."""
        if not entity_id:
            return None
        key = str(entity_id)
        try:
            return self.find_by_ids([key]).get(key)
        except RemoteServiceFailure as failure:
            if failure.is_not_found:
                return None
            raise

    def cached(self, entity_id: str) -> Entity | None:
        """Return an already fetched entity without any remote call."""
        return self._positive_cache.get(entity_id)

    def has_id(self, entity_id: str) -> bool:
        return self._positive_cache.has(entity_id)

    def screen_ids(self, ids: list[str]) -> list[str]:
        """Drop ids that must never be sent to the remote service."""
        return ids

    def _held_by_negative_cache(self, entity_id: str) -> bool:
        key = self.lookup_key(ID_LOOKUP, entity_id)
        entry = self._negative_cache.get(key)
        if entry is None:
            return False
        self._observer.on_negative_cache_hit(
            NegativeCacheHit(
                repository=self.name,
                entity_id=entity_id,
                category=entry.category,
                expires_in_seconds=self._negative_cache.ttl_remaining(key) or 0.0,
            )
        )
        return True

    def _fetch(self, ids: list[str]) -> None:
        for chunk in self._chunk_ids(ids):
            url = self._filter_url(chunk)
            try:
                result = self.get(url)
            except RemoteServiceFailure as failure:
                self._remember_failure(chunk, failure)
                raise
            if isinstance(result, DegradedResult):
                continue
            self._positive_cache.put_many(
                entity for entity in result.entities() if entity.id != ""
            )

    def _filter_url(self, ids: list[str]) -> str:
        return f"{self.resource_path}?{self.id_filter_param}={','.join(ids)}"

    def _chunk_ids(self, ids: list[str]) -> list[list[str]]:
        """Split ids into batches whose filter URL passes ``allowed_get_request``."""
        chunks: list[list[str]] = []
        current: list[str] = []
        for entity_id in ids:
            if current and self.allowed_get_request(self._filter_url([*current, entity_id])):
                current.append(entity_id)
                continue
            if current:
                chunks.append(current)
                current = []
            if self.allowed_get_request(self._filter_url([entity_id])):
                current = [entity_id]
                continue
            with log_context(
                {
                    fields.REPOSITORY: self.name,
                    fields.IDENTIFIERS: [entity_id],
                }
            ):
                _LOGGER.warning("Skipping id that cannot form an allowed request URL")
        if current:
            chunks.append(current)
        return chunks

    def _remember_failure(self, ids: list[str], failure: RemoteServiceFailure) -> None:
        cause = failure.cause or failure
        for entity_id in ids:
            self._negative_cache.record(
                self.lookup_key(ID_LOOKUP, entity_id),
                category=failure.category,
                error_type=type(cause).__name__,
                error_message=str(failure),
                http_status=failure.remote_status,
                repository=self.name,
                lookup_type=ID_LOOKUP,
                identifiers=(entity_id,),
            )

    # Named lookups with failure caching.

    def lookup_key(self, lookup_type: str, *identifiers: str) -> str:
        return lookup_key(self.name, lookup_type, identifiers)

    def raise_if_lookup_failed(self, lookup_type: str, *identifiers: str) -> None:
        """Raise ``CachedLookupFailure`` when this lookup failed recently."""
        self._negative_cache.raise_if_cached(self.lookup_key(lookup_type, *identifiers))

    def cache_lookup_failure(
        self, lookup_type: str, exc: BaseException, *identifiers: str
    ) -> NegativeCacheEntry | None:
        """Remember a failed lookup with a TTL chosen by its failure category."""
        return self._negative_cache.record_exception(
            self.lookup_key(lookup_type, *identifiers),
            exc,
            repository=self.name,
            lookup_type=lookup_type,
            identifiers=identifiers,
        )

    def clear_lookup_failure(self, lookup_type: str, *identifiers: str) -> None:
        self._negative_cache.forget(self.lookup_key(lookup_type, *identifiers))

    def cached_lookup_failure(
        self, lookup_type: str, *identifiers: str
    ) -> NegativeCacheEntry | None:
        return self._negative_cache.get(self.lookup_key(lookup_type, *identifiers))

    # Remote call primitives.

    def get(self, url: str) -> Document | DegradedResult:
        """GET one document, retrying transient transport failures."""
        return self._call("GET", url)

    def post(self, url: str, body: object) -> Document:
        """POST one document; structured errors are never retried."""
        if not isinstance(body, Mapping):
            body = make_request_body(body, resource_type=self.resource_type)
        return cast(Document, self._call("POST", url, body))

    def make_request_body(self, data: object) -> dict[str, Any]:
        return make_request_body(data, resource_type=self.resource_type)

    def request_headers(self) -> dict[str, str]:
        """Return headers for the next request, resolving the token on first use."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        headers.update(self._forwarded_headers)
        present = {name.lower() for name in headers}
        for name, resolver in self._header_resolvers.items():
            if name.lower() in present:
                continue
            value = resolver()
            if value:
                headers[name] = value
        headers["Authorization"] = self._credential.authorization_header()
        return headers

    def is_recoverable_error(self, message: str) -> bool:
        return any(pattern in message for pattern in self._recoverable_error_patterns)

    def allowed_get_request(self, path: str) -> bool:
        return allowed_get_request(
            path,
            base_uri=self._base_uri,
            max_url_length=self._settings.max_url_length,
        )

    def is_valid_url_path(self, path: str) -> bool:
        return is_valid_url_path(path)

    def handle_response(
        self, document: Document, *, endpoint: str = ""
    ) -> Entity | tuple[Entity, ...] | None:
        """Return the primary data of ``document`` or raise its reported errors."""
        if document.has_errors():
            errors = self.parse_document_errors(document)
            raise self._structured_failure("GET", endpoint, document, errors)
        return document.data

    def parse_document_errors(self, document: Document) -> ErrorCollection:
        """Normalize the top-level ``errors`` member of ``document``."""
        return self._error_parser.parse({"errors": document.errors})

    def get_lenient(self, url: str) -> Document:
        """GET one document without raising for the errors it reports.

        Structured errors are logged and reported, then the document is
        returned as-is. Transport failures are retried like ``get``; once the
        budget is spent the original exception is reported and re-raised.
        """
        return cast(Document, self._call("GET", url, lenient=True))

    def _call(
        self,
        method: str,
        url: str,
        body: Mapping[str, Any] | None = None,
        *,
        lenient: bool = False,
    ) -> Document | DegradedResult:
        tracker = _CallTracker(method=method, endpoint=url, started_at=self._clock())
        self._observer.on_request_started(
            RequestStarted(repository=self.name, method=method, endpoint=url)
        )
        with log_context(
            {
                fields.API_SERVICE: self.name,
                fields.API_ENDPOINT: url,
                fields.API_METHOD: method,
            }
        ):
            try:
                document = self._send_with_retry(tracker, body, lenient=lenient)
                if lenient:
                    result = self._report_document_errors(url, document)
                else:
                    result = self._handle_document(method, url, document)
            except Exception as exc:
                self._complete(
                    tracker,
                    RequestOutcome.FAILURE,
                    status_code=getattr(exc, "status_code", None),
                    category=classify_failure(exc),
                )
                raise

        if isinstance(result, DegradedResult):
            self._complete(tracker, RequestOutcome.DEGRADED, status_code=document.status_code)
        elif document.has_errors():
            self._complete(
                tracker,
                RequestOutcome.FAILURE,
                status_code=document.status_code,
                category=classify_status(document.status_code),
            )
        else:
            self._complete(tracker, RequestOutcome.SUCCESS, status_code=document.status_code)
        return result

    def _send_with_retry(
        self,
        tracker: _CallTracker,
        body: Mapping[str, Any] | None,
        *,
        lenient: bool = False,
    ) -> Document:
        retry_budget = self._settings.retry_attempts
        retries_used = 0
        while True:
            tracker.attempts += 1
            try:
                return self._send(tracker.method, tracker.endpoint, body)
            except DocumentParseError as exc:
                if lenient:
                    self._report_original(tracker, exc)
                    raise
                raise self._invalid_document_failure(tracker, exc) from exc
            except TRANSPORT_ERRORS as exc:
                category = classify_failure(exc)
                if category.is_transient and retries_used < retry_budget:
                    retries_used += 1
                    self._observer.on_retry(
                        RetryScheduled(
                            repository=self.name,
                            method=tracker.method,
                            endpoint=tracker.endpoint,
                            attempt=retries_used,
                            category=category,
                            backoff_seconds=self._settings.retry_backoff_seconds,
                            error=str(exc),
                        )
                    )
                    self._sleep(self._settings.retry_backoff_seconds)
                    continue
                if lenient:
                    self._report_original(tracker, exc, category)
                    raise
                raise self._transport_failure(tracker, exc, category) from exc

    def _send(self, method: str, url: str, body: Mapping[str, Any] | None) -> Document:
        headers = self.request_headers()
        if self._settings.log_requests:
            with log_context({fields.REQUEST_HEADERS: redact_headers(headers)}):
                _LOGGER.info("Remote request")
                if body is not None:
                    _LOGGER.debug("Remote request body: %s", json.dumps(body, default=str))
        if method == "POST":
            return self._transport.post(url, body or {}, headers)
        return self._transport.get(url, headers)

    def _handle_document(
        self, method: str, url: str, document: Document
    ) -> Document | DegradedResult:
        if not document.has_errors():
            return document

        errors = self.parse_document_errors(document)
        if method == "GET":
            for detail in errors.details():
                if self.is_recoverable_error(detail):
                    return self._degraded(url, detail)
        raise self._structured_failure(method, url, document, errors)

    def _degraded(self, url: str, detail: str) -> DegradedResult:
        context = {
            fields.EVENT: fields.DEGRADED_RESULT_EVENT,
            fields.API_SERVICE: self.name,
            fields.API_ENDPOINT: url,
        }
        with log_context({**context, fields.ERROR_MESSAGE: detail}):
            _LOGGER.warning("Recoverable remote service error")
        self._reporter.capture_message(detail, context=context)
        return DegradedResult(error=detail)

    def _report_document_errors(self, url: str, document: Document) -> Document:
        if not document.has_errors():
            return document
        details = self.parse_document_errors(document).details()
        context = {
            fields.API_SERVICE: self.name,
            fields.API_ENDPOINT: url,
            fields.API_STATUS: document.status_code,
        }
        with log_context({fields.ERRORS: details}):
            _LOGGER.error("Remote repository returned errors")
        for detail in details:
            self._reporter.capture_message(detail, context=context)
        return document

    def _report_original(
        self,
        tracker: _CallTracker,
        exc: BaseException,
        category: FailureCategory | None = None,
    ) -> None:
        category = category or classify_failure(exc)
        with log_context(
            {
                fields.ERROR_TYPE: type(exc).__name__,
                fields.FAILURE_CATEGORY: category.value,
            }
        ):
            _LOGGER.error("Remote request failed after %d attempt(s)", tracker.attempts)
        self._reporter.capture_exception(
            exc,
            context={
                fields.API_SERVICE: self.name,
                fields.API_ENDPOINT: tracker.endpoint,
                fields.API_METHOD: tracker.method,
                fields.FAILURE_CATEGORY: category.value,
            },
        )

    def _structured_failure(
        self, method: str, url: str, document: Document, errors: ErrorCollection
    ) -> RemoteServiceFailure:
        category = self._classify_errors(errors, document.status_code)
        failure = RemoteServiceFailure.from_remote_response(
            service=self.name,
            endpoint=url,
            status=document.status_code,
            errors=errors,
            category=category,
        )
        with log_context({fields.API_STATUS: document.status_code}):
            for error in errors:
                with log_context(
                    {
                        fields.ERROR_MESSAGE: error.detail,
                        fields.FAILURE_CATEGORY: self._classify_error_status(
                            error.status_code, document.status_code
                        ).value,
                    }
                ):
                    _LOGGER.error("Remote service reported error")
        self._report(method, url, failure, failure)
        return failure

    def _classify_errors(self, errors: ErrorCollection, response_status: int) -> FailureCategory:
        for error in errors:
            category = self._classify_error_status(error.status_code, response_status)
            if category is not FailureCategory.UNKNOWN:
                return category
        return FailureCategory.UNKNOWN

    def _classify_error_status(
        self, error_status: int | None, response_status: int
    ) -> FailureCategory:
        if error_status is not None and 400 <= error_status <= 599:
            return classify_status(error_status)
        return classify_status(response_status)

    def _transport_failure(
        self, tracker: _CallTracker, exc: BaseException, category: FailureCategory
    ) -> RemoteServiceFailure:
        remote_status = extract_http_status(exc)
        errors = self._errors_from_status_body(exc)
        if remote_status is not None:
            detail = "; ".join(errors.details()) if errors is not None else f"HTTP {remote_status}"
            message = f"Remote service error ({remote_status}): {detail}"
            status_code = remote_status
        else:
            message = (
                "Error getting response from remote server after "
                f"{tracker.attempts} attempt(s): {category.value}"
            )
            status_code = TRANSPORT_FAILURE_STATUS
        failure = RemoteServiceFailure(
            message=message,
            category=category,
            kind=FailureKind.TRANSPORT,
            status_code=status_code,
            remote_status=remote_status,
            service=self.name,
            endpoint=tracker.endpoint,
            errors=errors,
            cause=exc,
        )
        self._report(tracker.method, tracker.endpoint, failure, exc)
        return failure

    def _errors_from_status_body(self, exc: BaseException) -> ErrorCollection | None:
        if not isinstance(exc, HttpStatusError) or exc.response_body.strip() == "":
            return None
        try:
            payload = json.loads(exc.response_body)
        except ValueError:
            return None
        return self._error_parser.parse(payload)

    def _invalid_document_failure(
        self, tracker: _CallTracker, exc: DocumentParseError
    ) -> RemoteServiceFailure:
        with log_context({"response_body": str(exc.payload)[:2000]}):
            _LOGGER.warning("Remote service returned a non-document response")

        embedded = exc.payload_message()
        if embedded is not None:
            message = embedded
        elif isinstance(exc.payload, Mapping) and exc.payload:
            message = SEE_LOGS_MESSAGE
        else:
            message = INVALID_FORMAT_MESSAGE

        is_error_status = 400 <= exc.status_code <= 599
        failure = RemoteServiceFailure(
            message=message,
            category=classify_status(exc.status_code) if is_error_status else FailureCategory.UNKNOWN,
            kind=FailureKind.INVALID_DOCUMENT,
            status_code=exc.status_code if is_error_status else DEFAULT_FAILURE_STATUS,
            remote_status=exc.status_code or None,
            service=self.name,
            endpoint=tracker.endpoint,
            cause=exc,
        )
        self._report(tracker.method, tracker.endpoint, failure, exc)
        return failure

    def _report(
        self,
        method: str,
        url: str,
        failure: RemoteServiceFailure,
        reported: BaseException,
    ) -> None:
        self._observer.on_failure_classified(
            FailureClassified(
                repository=self.name,
                method=method,
                endpoint=url,
                category=failure.category,
                kind=failure.kind,
                status_code=failure.status_code,
                message=failure.message,
            )
        )
        self._reporter.capture_exception(
            reported,
            context={
                fields.API_SERVICE: self.name,
                fields.API_ENDPOINT: url,
                fields.API_METHOD: method,
                fields.API_STATUS: failure.status_code,
                fields.FAILURE_CATEGORY: failure.category.value,
            },
        )

    def _complete(
        self,
        tracker: _CallTracker,
        outcome: RequestOutcome,
        *,
        status_code: int | None = None,
        category: FailureCategory | None = None,
    ) -> None:
        self._observer.on_request_completed(
            RequestCompleted(
                repository=self.name,
                method=tracker.method,
                endpoint=tracker.endpoint,
                outcome=outcome,
                duration_ms=(self._clock() - tracker.started_at) * 1000.0,
                attempts=tracker.attempts,
                status_code=status_code if isinstance(status_code, int) else None,
                category=category,
            )
        )


def _unique_ids(ids: Iterable[object]) -> list[str]:
    """Drop empty and duplicate ids, preserving first-seen order."""
    if isinstance(ids, str):
        ids = [ids]
    seen: set[str] = set()
    output: list[str] = []
    for raw in ids:
        if raw is None or raw == "":
            continue
        entity_id = str(raw)
        if entity_id in seen:
            continue
        seen.add(entity_id)
        output.append(entity_id)
    return output


def _checked_resolvers(
    resolvers: Mapping[str, HeaderResolver | None],
) -> dict[str, HeaderResolver]:
    """Keep configured header resolvers, rejecting values that cannot be called."""
    checked: dict[str, HeaderResolver] = {}
    for name, resolver in resolvers.items():
        if resolver is None:
            continue
        if not callable(resolver):
            raise TypeError(f"header resolver for {name!r} must be callable")
        checked[name] = resolver
    return checked
