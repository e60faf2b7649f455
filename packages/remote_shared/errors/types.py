"""Canonical error object types shared by remote clients.

A canonical error follows the JSON:API error object layout. ``detail`` is the
one field every consumer may rely on: it is always a string.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping

CANONICAL_ERROR_KEYS = (
    "id",
    "status",
    "code",
    "title",
    "detail",
    "source",
    "meta",
    "links",
)
DEFAULT_DETAIL = "No error data provided"


@dataclass(frozen=True)
class ErrorSource:
    """Location of the input that caused one error."""

    pointer: str | None = None
    parameter: str | None = None

    def to_dict(self) -> dict[str, str]:
        output: dict[str, str] = {}
        if self.pointer is not None:
            output["pointer"] = self.pointer
        if self.parameter is not None:
            output["parameter"] = self.parameter
        return output


@dataclass(frozen=True)
class CanonicalError:
    """One normalized error object."""

    __hash__ = None  # type: ignore[assignment]

    detail: str
    id: str | None = None
    status: str | None = None
    code: str | None = None
    title: str | None = None
    source: ErrorSource | None = None
    meta: Mapping[str, Any] = field(default_factory=dict)
    links: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CanonicalError:
        """Build a canonical error from one normalized plain mapping."""
        detail = data.get("detail")
        if detail is None:
            detail = data.get("message")
        if detail is None:
            detail = data.get("title")
        source = data.get("source")
        meta = data.get("meta")
        links = data.get("links")
        return cls(
            detail=DEFAULT_DETAIL if detail is None else str(detail),
            id=_optional_text(data.get("id")),
            status=_optional_text(data.get("status")),
            code=_optional_text(data.get("code")),
            title=_optional_text(data.get("title")),
            source=(
                ErrorSource(
                    pointer=_optional_text(source.get("pointer")),
                    parameter=_optional_text(source.get("parameter")),
                )
                if isinstance(source, Mapping)
                else None
            ),
            meta=dict(meta) if isinstance(meta, Mapping) else {},
            links=dict(links) if isinstance(links, Mapping) else {},
        )

    @property
    def status_code(self) -> int | None:
        """Return ``status`` as an integer HTTP status when it parses as one."""
        if self.status is None:
            return None
        try:
            return int(self.status)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation, omitting empty members."""
        output: dict[str, Any] = {}
        for key in ("id", "status", "code", "title"):
            value = getattr(self, key)
            if value is not None:
                output[key] = value
        output["detail"] = self.detail
        if self.source is not None and self.source.to_dict():
            output["source"] = self.source.to_dict()
        if self.meta:
            output["meta"] = dict(self.meta)
        if self.links:
            output["links"] = dict(self.links)
        return output


class ErrorCollection:
    """Immutable, ordered, non-empty sequence of canonical errors."""

    __slots__ = ("_errors",)

    def __init__(self, errors: Iterable[CanonicalError]) -> None:
        items = tuple(errors)
        if not items:
            raise ValueError("ErrorCollection requires at least one error")
        self._errors = items

    def __iter__(self) -> Iterator[CanonicalError]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __getitem__(self, index: int) -> CanonicalError:
        return self._errors[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ErrorCollection):
            return NotImplemented
        return self._errors == other._errors

    def __repr__(self) -> str:
        return f"ErrorCollection({list(self._errors)!r})"

    def first(self) -> CanonicalError:
        return self._errors[0]

    def details(self) -> list[str]:
        """Return every error ``detail`` in order."""
        return [error.detail for error in self._errors]

    def to_list(self) -> list[dict[str, Any]]:
        return [error.to_dict() for error in self._errors]


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
