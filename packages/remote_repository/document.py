"""JSON:API documents and entity records.

Only the parts of JSON:API the repositories depend on are modelled: resource
identity, attributes, relationships, meta, and the top-level ``errors``
member.
"""

from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field, is_dataclass
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel

from .errors import (
    INVALID_REQUEST_STATUS,
    DocumentParseError,
    FailureKind,
    RemoteServiceFailure,
)
from .failures import FailureCategory

_TOP_LEVEL_MEMBERS = ("data", "errors", "meta")


def _frozen_mapping(value: object) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        return MappingProxyType({})
    return MappingProxyType(copy.deepcopy(dict(value)))


@dataclass(frozen=True)
class Entity:
    """One remotely sourced record identified by a stable id."""

    __hash__ = None  # type: ignore[assignment]

    id: str
    type: str = ""
    attributes: Mapping[str, Any] = field(default_factory=dict)
    relationships: Mapping[str, Any] = field(default_factory=dict)
    meta: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", _frozen_mapping(self.attributes))
        object.__setattr__(self, "relationships", _frozen_mapping(self.relationships))
        object.__setattr__(self, "meta", _frozen_mapping(self.meta))

    @classmethod
    def from_resource(cls, resource: Mapping[str, Any]) -> Entity:
        """Build an entity from one JSON:API resource object."""
        raw_id = resource.get("id")
        return cls(
            id="" if raw_id is None else str(raw_id),
            type=str(resource.get("type") or ""),
            attributes=resource.get("attributes") or {},
            relationships=resource.get("relationships") or {},
            meta=resource.get("meta") or {},
        )

    def get(self, attribute: str, default: Any = None) -> Any:
        return self.attributes.get(attribute, default)

    def to_resource(self) -> dict[str, Any]:
        """Return the JSON:API resource object representation."""
        resource: dict[str, Any] = {"id": self.id, "type": self.type}
        resource["attributes"] = copy.deepcopy(dict(self.attributes))
        if self.relationships:
            resource["relationships"] = copy.deepcopy(dict(self.relationships))
        if self.meta:
            resource["meta"] = copy.deepcopy(dict(self.meta))
        return resource


@dataclass(frozen=True)
class Document:
    """Parsed top-level JSON:API document."""

    __hash__ = None  # type: ignore[assignment]

    data: Entity | tuple[Entity, ...] | None = None
    errors: Any = None
    meta: Mapping[str, Any] = field(default_factory=dict)
    status_code: int = 200

    @classmethod
    def from_payload(cls, payload: Any, *, status_code: int = 200) -> Document:
        """Parse one decoded JSON payload.

        Raises ``DocumentParseError`` when the payload has none of the
        top-level ``data``, ``errors``, or ``meta`` members.
        """
        if not isinstance(payload, Mapping) or not any(
            member in payload for member in _TOP_LEVEL_MEMBERS
        ):
            raise DocumentParseError(
                message="Remote service returned invalid response format",
                status_code=status_code,
                payload=payload,
            )

        raw_data = payload.get("data")
        data: Entity | tuple[Entity, ...] | None
        if isinstance(raw_data, Mapping):
            data = Entity.from_resource(raw_data)
        elif isinstance(raw_data, list):
            data = tuple(
                Entity.from_resource(item) for item in raw_data if isinstance(item, Mapping)
            )
        else:
            data = None

        errors = payload.get("errors")
        return cls(
            data=data,
            errors=errors if "errors" in payload else None,
            meta=_frozen_mapping(payload.get("meta")),
            status_code=status_code,
        )

    def has_errors(self) -> bool:
        """Return whether the document reports errors instead of data."""
        if self.errors is None:
            return False
        if isinstance(self.errors, (list, tuple, Mapping, str)):
            return len(self.errors) > 0
        return True

    def entities(self) -> list[Entity]:
        """Return the primary data as a list, whatever its cardinality."""
        if self.data is None:
            return []
        if isinstance(self.data, Entity):
            return [self.data]
        return list(self.data)


@dataclass(frozen=True)
class DegradedResult:
    """Returned instead of raising when a remote error is known to be benign."""

    error: str

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error}


def make_request_body(data: object, *, resource_type: str = "") -> dict[str, Any]:
    """Wrap a mapping or object as the ``data`` member of a request document."""
    attributes = _as_attributes(data)
    if attributes is None:
        raise RemoteServiceFailure(
            message=f"Data must be a mapping or object, {type(data).__name__} given",
            category=FailureCategory.CLIENT_ERROR,
            kind=FailureKind.INVALID_REQUEST,
            status_code=INVALID_REQUEST_STATUS,
        )

    resource: dict[str, Any] = {"type": resource_type or "array"}
    resource_id = attributes.pop("id", None)
    if resource_id is not None:
        resource["id"] = str(resource_id)
    resource["attributes"] = attributes
    return {"data": resource}


def _as_attributes(data: object) -> dict[str, Any] | None:
    if isinstance(data, Mapping):
        return copy.deepcopy(dict(data))
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if is_dataclass(data) and not isinstance(data, type):
        return asdict(data)
    if isinstance(data, (str, bytes, int, float, bool, list, tuple)) or data is None:
        return None
    if hasattr(data, "__dict__"):
        return {key: value for key, value in vars(data).items() if not key.startswith("_")}
    return None
