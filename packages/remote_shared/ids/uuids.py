"""UUID shape validation helpers.

Only the canonical 8-4-4-4-12 hexadecimal textual form is accepted, in either
case. Braced, URN-prefixed, and unhyphenated forms are rejected so the value
can be sent verbatim in a query string.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class UuidFilterResult:
    """Partition of candidate identifiers into accepted and rejected values."""

    valid: tuple[str, ...]
    invalid: tuple[object, ...]

    @property
    def has_invalid(self) -> bool:
        return bool(self.invalid)


def is_uuid(value: object) -> bool:
    """Return whether ``value`` is a non-empty canonical UUID string."""
    if not isinstance(value, str) or value == "":
        return False
    # fullmatch avoids ``$`` accepting a trailing newline.
    return _UUID_PATTERN.fullmatch(value) is not None


def filter_uuids(ids: Iterable[object]) -> UuidFilterResult:
    """Split ``ids`` into valid UUIDs and rejected values, preserving order."""
    valid: list[str] = []
    invalid: list[object] = []
    for candidate in ids:
        if is_uuid(candidate):
            valid.append(str(candidate))
        else:
            invalid.append(candidate)
    return UuidFilterResult(valid=tuple(valid), invalid=tuple(invalid))
