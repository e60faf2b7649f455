"""Typed errors raised by remote repositories.

Callers only need ``RemoteServiceFailure`` and its ``category`` to decide how
to react; the remaining types describe configuration and input problems that
are raised before any network call is made.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from packages.remote_shared.errors import ErrorCollection

from .failures import FailureCategory, is_transient

DEFAULT_FAILURE_STATUS = 502
TRANSPORT_FAILURE_STATUS = 503
INVALID_REQUEST_STATUS = 400


# Not frozen: contextlib assigns __traceback__ on exceptions leaving a
# @contextmanager block.
@dataclass(eq=False)
class RemoteRepositoryError(Exception):
    """Base error type for remote repository failures."""

    message: str

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


class FailureKind(str, Enum):
    """Which stage of a remote call produced a ``RemoteServiceFailure``."""

    TRANSPORT = "transport"
    STRUCTURED = "structured"
    INVALID_DOCUMENT = "invalid_document"
    INVALID_REQUEST = "invalid_request"


@dataclass(eq=False)
class RemoteServiceFailure(RemoteRepositoryError):
    """Uniform failure raised for every classified remote call failure.

    ``status_code`` is the status to surface to our own callers: the remote
    4xx/5xx status when one exists, 503 when the service could not be reached,
    and 502 otherwise. ``remote_status`` is the raw status the remote returned.
    """

    category: FailureCategory = FailureCategory.UNKNOWN
    kind: FailureKind = FailureKind.STRUCTURED
    status_code: int = DEFAULT_FAILURE_STATUS
    remote_status: int | None = None
    service: str = ""
    endpoint: str = ""
    errors: ErrorCollection | None = None
    cause: BaseException | None = None

    @property
    def is_transient(self) -> bool:
        return is_transient(self.category)

    @property
    def is_not_found(self) -> bool:
        return self.category is FailureCategory.NOT_FOUND

    def details(self) -> list[str]:
        """Return the remote error details, or the message when none exist."""
        if self.errors is None:
            return [self.message]
        return self.errors.details()

    @classmethod
    def from_remote_response(
        cls,
        *,
        service: str,
        endpoint: str,
        status: int | None,
        errors: ErrorCollection,
        category: FailureCategory,
    ) -> RemoteServiceFailure:
        """Build a structured failure from a remote error document."""
        status_code = (
            status
            if status is not None and 400 <= status <= 599
            else DEFAULT_FAILURE_STATUS
        )
        details = "; ".join(errors.details())
        return cls(
            message=f"Remote service error ({status_code}): {details}",
            category=category,
            kind=FailureKind.STRUCTURED,
            status_code=status_code,
            remote_status=status,
            service=service,
            endpoint=endpoint,
            errors=errors,
        )


@dataclass(eq=False)
class DocumentParseError(RemoteRepositoryError):
    """Remote response body is not a JSON:API document."""

    status_code: int = 0
    payload: Any = None

    def payload_message(self) -> str | None:
        """Return an error message embedded in a non-document JSON payload."""
        if not isinstance(self.payload, Mapping):
            return None
        for key in ("errorMessage", "message", "error"):
            value = self.payload.get(key)
            if isinstance(value, str) and value.strip() != "":
                return value
        return None


@dataclass(eq=False)
class CachedLookupFailure(RemoteRepositoryError):
    """A lookup was skipped because a recent failure for it is still cached."""

    repository: str = "unknown"
    lookup_type: str = "unknown"
    identifiers: tuple[str, ...] = ()
    category: FailureCategory = FailureCategory.UNKNOWN
    original_error_type: str = "unknown"
    original_error_message: str = "unknown"
    cached_at: str = "unknown"
    http_status: int | None = None
    status_code: int = TRANSPORT_FAILURE_STATUS

    @property
    def is_transient(self) -> bool:
        return is_transient(self.category)

    @property
    def is_not_found(self) -> bool:
        return self.category is FailureCategory.NOT_FOUND

    @property
    def is_server_error(self) -> bool:
        return self.category is FailureCategory.SERVER_ERROR

    @property
    def is_auth_error(self) -> bool:
        return self.category is FailureCategory.AUTH_ERROR

    @property
    def is_rate_limited(self) -> bool:
        return self.category is FailureCategory.RATE_LIMITED


@dataclass(eq=False)
class RemoteRepositoryConfigurationError(RemoteRepositoryError):
    """Repository cannot be constructed from the supplied configuration."""

    checked_keys: tuple[str, ...] = field(default_factory=tuple)


@dataclass(eq=False)
class CredentialError(RemoteRepositoryError):
    """Bearer token could not be obtained from the token provider."""

    cause: BaseException | None = None
