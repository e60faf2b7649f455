"""Resilient remote entity repositories.

Public API for fetching JSON:API entities by id with retry, positive and
negative caching, identifier validation, and normalized error reporting.
"""

from .config import COMPONENT_ID, RemoteRepositorySettings, resolve_remote_repository_settings
from .credentials import BearerCredential, StaticTokenProvider, TokenProvider
from .document import DegradedResult, Document, Entity, make_request_body
from .errors import (
    CachedLookupFailure,
    CredentialError,
    DocumentParseError,
    FailureKind,
    RemoteRepositoryConfigurationError,
    RemoteRepositoryError,
    RemoteServiceFailure,
)
from .failures import (
    TRANSIENT_CATEGORIES,
    FailureCategory,
    TransportSignal,
    classify_failure,
    classify_status,
    extract_http_status,
    is_transient,
)
from .negative_cache import NegativeCache, NegativeCacheEntry, NegativeCacheTtlPolicy, lookup_key
from .observability import (
    CompositeRepositoryObserver,
    FailureClassified,
    IdsRejected,
    LoggingRepositoryObserver,
    NegativeCacheHit,
    NullRepositoryObserver,
    ProfilingObserver,
    RepositoryObserver,
    RequestCompleted,
    RequestOutcome,
    RequestStarted,
    RetryScheduled,
)
from .positive_cache import PositiveCache
from .reporting import (
    CompositeErrorReporter,
    ErrorReporter,
    LoggingErrorReporter,
    TracingErrorReporter,
    default_error_reporter,
)
from .repository import HeaderResolver, RemoteRepository
from .transport import DocumentTransport, HttpDocumentTransport
from .url_guard import allowed_get_request, is_valid_url_path
from .uuid_repository import UuidValidatingRemoteRepository

__all__ = [
    "COMPONENT_ID",
    "TRANSIENT_CATEGORIES",
    "BearerCredential",
    "CachedLookupFailure",
    "CompositeErrorReporter",
    "CompositeRepositoryObserver",
    "CredentialError",
    "DegradedResult",
    "Document",
    "DocumentParseError",
    "DocumentTransport",
    "Entity",
    "ErrorReporter",
    "FailureCategory",
    "FailureClassified",
    "FailureKind",
    "HeaderResolver",
    "HttpDocumentTransport",
    "IdsRejected",
    "LoggingErrorReporter",
    "LoggingRepositoryObserver",
    "NegativeCache",
    "NegativeCacheEntry",
    "NegativeCacheHit",
    "NegativeCacheTtlPolicy",
    "NullRepositoryObserver",
    "PositiveCache",
    "ProfilingObserver",
    "RemoteRepository",
    "RemoteRepositoryConfigurationError",
    "RemoteRepositoryError",
    "RemoteRepositorySettings",
    "RemoteServiceFailure",
    "RepositoryObserver",
    "RequestCompleted",
    "RequestOutcome",
    "RequestStarted",
    "RetryScheduled",
    "StaticTokenProvider",
    "TokenProvider",
    "TracingErrorReporter",
    "TransportSignal",
    "UuidValidatingRemoteRepository",
    "allowed_get_request",
    "classify_failure",
    "classify_status",
    "default_error_reporter",
    "extract_http_status",
    "is_transient",
    "is_valid_url_path",
    "lookup_key",
    "make_request_body",
    "resolve_remote_repository_settings",
]
