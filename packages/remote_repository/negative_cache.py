"""Negative cache recording recent failed lookups.

Entries expire lazily: nothing evicts in the background, and an entry whose
``expires_at`` has passed is dropped the next time it is looked up. The TTL of
each entry depends on its failure category, so a missing record is remembered
far longer than a timeout.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable, Iterable, Mapping

from packages.remote_shared.logging import fields, get_logger, log_context

from .config import DEFAULT_NEGATIVE_CACHE_TTL_BY_CATEGORY
from .errors import CachedLookupFailure
from .failures import FailureCategory, classify_failure, extract_http_status

_LOGGER = get_logger(__name__)
KEY_PREFIX = "remote_failure"


@dataclass(frozen=True)
class NegativeCacheEntry:
    """One remembered lookup failure."""

    key: str
    category: FailureCategory
    expires_at: float
    cached_at: str
    error_type: str
    error_message: str
    http_status: int | None = None
    repository: str = ""
    lookup_type: str = ""
    identifiers: tuple[str, ...] = ()

    def is_live(self, now: float) -> bool:
        return now < self.expires_at

    def to_failure(self) -> CachedLookupFailure:
        """Return the exception describing this cached failure."""
        status = f" (HTTP {self.http_status})" if self.http_status is not None else ""
        message = (
            f"Cached lookup failure: {self.repository or 'unknown'}::"
            f"{self.lookup_type or 'unknown'}({', '.join(self.identifiers)})"
            f" - original error{status}: {self.error_type}: {self.error_message}"
            f" [cached at {self.cached_at}]"
        )
        return CachedLookupFailure(
            message=message,
            repository=self.repository or "unknown",
            lookup_type=self.lookup_type or "unknown",
            identifiers=self.identifiers,
            category=self.category,
            original_error_type=self.error_type,
            original_error_message=self.error_message,
            cached_at=self.cached_at,
            http_status=self.http_status,
        )


@dataclass(frozen=True)
class NegativeCacheTtlPolicy:
    """Category-dependent TTLs, in seconds."""

    default_ttl_seconds: float = 120.0
    ttl_by_category: Mapping[FailureCategory, float] = field(
        default_factory=lambda: dict(DEFAULT_NEGATIVE_CACHE_TTL_BY_CATEGORY)
    )

    def ttl_for(self, category: FailureCategory) -> float:
        return float(self.ttl_by_category.get(category, self.default_ttl_seconds))


def lookup_key(repository: str, lookup_type: str, identifiers: Iterable[str]) -> str:
    """Build the cache key for one repository lookup.

    Identifiers are hashed so arbitrarily long composite lookups keep a
    bounded key length.
    """
    digest = hashlib.md5(
        ":".join(identifiers).encode("utf-8"), usedforsecurity=False
    ).hexdigest()
    return f"{KEY_PREFIX}:{repository.lower()}:{lookup_type}:{digest}"


class NegativeCache:
    """Key to ``NegativeCacheEntry`` store with lazy, category-based expiry.

    ``clock`` must be monotonic and measured in seconds; it drives expiry.
    ``wall_clock`` only stamps ``cached_at`` for diagnostics.
    """

    def __init__(
        self,
        *,
        ttl_policy: NegativeCacheTtlPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._ttl_policy = ttl_policy or NegativeCacheTtlPolicy()
        self._clock = clock
        self._wall_clock = wall_clock or (lambda: datetime.now(UTC))
        self._entries: dict[str, NegativeCacheEntry] = {}

    @property
    def ttl_policy(self) -> NegativeCacheTtlPolicy:
        return self._ttl_policy

    def get(self, key: str) -> NegativeCacheEntry | None:
        """Return the live entry for ``key``, dropping it if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_live(self._clock()):
            del self._entries[key]
            return None
        return entry

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        self.purge_expired()
        return len(self._entries)

    def ttl_remaining(self, key: str) -> float | None:
        """Return seconds until ``key`` expires, or ``None`` when absent."""
        entry = self.get(key)
        if entry is None:
            return None
        return entry.expires_at - self._clock()

    def record(
        self,
        key: str,
        *,
        category: FailureCategory,
        error_type: str = "unknown",
        error_message: str = "",
        http_status: int | None = None,
        repository: str = "",
        lookup_type: str = "",
        identifiers: Iterable[str] = (),
    ) -> NegativeCacheEntry | None:
        """Remember one failure; a zero TTL for ``category`` stores nothing."""
        ttl = self._ttl_policy.ttl_for(category)
        if ttl <= 0:
            return None

        entry = NegativeCacheEntry(
            key=key,
            category=category,
            expires_at=self._clock() + ttl,
            cached_at=self._wall_clock().isoformat(),
            error_type=error_type,
            error_message=error_message,
            http_status=http_status,
            repository=repository,
            lookup_type=lookup_type,
            identifiers=tuple(identifiers),
        )
        self._entries[key] = entry
        with log_context(
            {
                fields.EVENT: fields.NEGATIVE_CACHE_STORE_EVENT,
                fields.CACHE_KEY: key,
                fields.CACHE_TTL: ttl,
                fields.FAILURE_CATEGORY: category.value,
                fields.API_STATUS: http_status,
                fields.LOOKUP_TYPE: lookup_type or None,
            }
        ):
            _LOGGER.debug("Cached remote lookup failure")
        return entry

    def record_exception(
        self,
        key: str,
        exc: BaseException,
        *,
        category: FailureCategory | None = None,
        repository: str = "",
        lookup_type: str = "",
        identifiers: Iterable[str] = (),
    ) -> NegativeCacheEntry | None:
        """Classify ``exc`` (unless ``category`` is given) and remember it."""
        return self.record(
            key,
            category=category or classify_failure(exc),
            error_type=type(exc).__name__,
            error_message=str(exc),
            http_status=extract_http_status(exc),
            repository=repository,
            lookup_type=lookup_type,
            identifiers=identifiers,
        )

    def raise_if_cached(self, key: str) -> None:
        """Raise ``CachedLookupFailure`` when ``key`` holds a live entry."""
        entry = self.get(key)
        if entry is not None:
            raise entry.to_failure()

    def forget(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_live(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)
