"""Normalization of arbitrary error-shaped values into canonical error lists.

Remote services, client code, and exceptions report failures in many shapes:
plain strings, exceptions, ``{"message": ...}`` envelopes, per-field
validation maps, and already-canonical JSON:API error lists. This module
classifies the input into one ``ErrorShape`` and dispatches to exactly one
handler per shape, so every branch is independently testable.

The output is always ``{"errors": [dict, ...]}`` with at least one error, and
every error carries a string ``detail``.
"""

from __future__ import annotations

import traceback
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Sequence

from pydantic import BaseModel

from packages.remote_shared.logging import get_logger

from .types import CANONICAL_ERROR_KEYS, DEFAULT_DETAIL

_LOGGER = get_logger(__name__)

ERRORS_NULL_DETAIL = "Error data was null"
NULL_ENTRY_DETAIL = "Null error entry"
UNKNOWN_TYPE_DETAIL = "Unknown error data type"
FIELD_VALIDATION_DETAIL = "Field validation error"
_FALLBACK_DETAIL_KEYS = ("detail", "title", "description", "text", "msg")
_SCALAR_TYPES = (str, bytes, int, float, bool)


class ErrorShape(str, Enum):
    """Closed set of recognized error input shapes."""

    NONE = "none"
    SCALAR = "scalar"
    EXCEPTION = "exception"
    MESSAGE_MAP = "message_map"
    ERRORS_NULL = "errors_null"
    ERRORS_SCALAR = "errors_scalar"
    VALIDATION_MAP = "validation_map"
    ERROR_LIST = "error_list"
    ERROR_OBJECT = "error_object"
    OTHER_MAPPING = "other_mapping"
    CONVERTIBLE = "convertible"
    UNKNOWN = "unknown"


def match_error_shape(data: object) -> ErrorShape:
    """Classify ``data`` into exactly one ``ErrorShape``."""
    if data is None:
        return ErrorShape.NONE
    if isinstance(data, _SCALAR_TYPES):
        return ErrorShape.SCALAR
    if isinstance(data, BaseException):
        return ErrorShape.EXCEPTION
    if isinstance(data, Mapping):
        return _match_mapping_shape(data)
    if isinstance(data, (list, tuple)):
        return ErrorShape.ERROR_LIST
    if _is_convertible(data):
        return ErrorShape.CONVERTIBLE
    return ErrorShape.UNKNOWN


def _match_mapping_shape(data: Mapping[Any, Any]) -> ErrorShape:
    if "errors" in data:
        errors = data["errors"]
        if errors is None:
            return ErrorShape.ERRORS_NULL
        if isinstance(errors, _SCALAR_TYPES):
            return ErrorShape.ERRORS_SCALAR
        if isinstance(errors, Mapping):
            return ErrorShape.VALIDATION_MAP
        if isinstance(errors, (list, tuple)):
            return ErrorShape.ERROR_LIST
        return ErrorShape.UNKNOWN
    if data.get("message") is not None or data.get("error") is not None:
        return ErrorShape.MESSAGE_MAP
    if looks_error_shaped(data):
        return ErrorShape.ERROR_OBJECT
    return ErrorShape.OTHER_MAPPING


def looks_error_shaped(data: Mapping[Any, Any]) -> bool:
    """Return whether a mapping already resembles a canonical error object."""
    if not data:
        return False
    if isinstance(data.get("detail"), str) or isinstance(data.get("title"), str):
        return True
    return all(key in CANONICAL_ERROR_KEYS for key in data)


def _is_convertible(data: object) -> bool:
    if isinstance(data, BaseModel):
        return True
    if is_dataclass(data) and not isinstance(data, type):
        return True
    return hasattr(data, "__dict__") and not isinstance(data, type)


class ErrorDataNormalizer:
    """Convert any error-shaped value into ``{"errors": [dict, ...]}``."""

    def __init__(
        self,
        *,
        include_stack_trace: bool = False,
        legacy_bool_coercion: bool = True,
    ) -> None:
        self._include_stack_trace = include_stack_trace
        self._legacy_bool_coercion = legacy_bool_coercion
        self._handlers: dict[ErrorShape, Callable[[Any], list[dict[str, Any]]]] = {
            ErrorShape.NONE: self._from_none,
            ErrorShape.SCALAR: self._from_scalar,
            ErrorShape.EXCEPTION: self._from_exception,
            ErrorShape.MESSAGE_MAP: self._from_message_map,
            ErrorShape.ERRORS_NULL: self._from_errors_null,
            ErrorShape.ERRORS_SCALAR: self._from_errors_scalar,
            ErrorShape.VALIDATION_MAP: self._from_validation_map,
            ErrorShape.ERROR_LIST: self._from_error_list,
            ErrorShape.ERROR_OBJECT: self._from_error_object,
            ErrorShape.OTHER_MAPPING: self._from_other_mapping,
            ErrorShape.CONVERTIBLE: self._from_convertible,
            ErrorShape.UNKNOWN: self._from_unknown,
        }

    def normalize(self, data: object) -> dict[str, list[dict[str, Any]]]:
        """Return normalized errors for ``data``; never raises."""
        return {"errors": self.normalize_errors(data)}

    def normalize_errors(self, data: object) -> list[dict[str, Any]]:
        """Return the normalized error list for ``data``; never empty."""
        try:
            errors = self._dispatch(data)
        except Exception as exc:
            _LOGGER.debug("Error data normalization failed", exc_info=exc)
            errors = [{"detail": f"Failed to parse error data: {type(exc).__name__}"}]
        return errors or [{"detail": DEFAULT_DETAIL}]

    def text(self, value: object) -> str:
        """Return the string form of a scalar using the configured coercion."""
        if isinstance(value, bool):
            if self._legacy_bool_coercion:
                return "1" if value else "false"
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return str(value)

    def _dispatch(self, data: object) -> list[dict[str, Any]]:
        return self._handlers[match_error_shape(data)](data)

    def _from_none(self, _: None) -> list[dict[str, Any]]:
        return [{"detail": DEFAULT_DETAIL}]

    def _from_scalar(self, data: object) -> list[dict[str, Any]]:
        return [{"detail": self.text(data)}]

    def _from_exception(self, exc: BaseException) -> list[dict[str, Any]]:
        error: dict[str, Any] = {
            "title": type(exc).__name__,
            "detail": str(exc) or type(exc).__name__,
        }
        code = _exception_code(exc)
        if code is not None:
            error["code"] = code

        meta: dict[str, Any] = {}
        if exc.__traceback__ is not None:
            frames = traceback.extract_tb(exc.__traceback__)
            if frames:
                meta["file"] = frames[-1].filename
                meta["line"] = frames[-1].lineno
            if self._include_stack_trace:
                meta["trace"] = "".join(traceback.format_tb(exc.__traceback__))
        if meta:
            error["meta"] = meta
        return [error]

    def _from_message_map(self, data: Mapping[str, Any]) -> list[dict[str, Any]]:
        message = data.get("message")
        if message is not None:
            if isinstance(message, _SCALAR_TYPES):
                return [{"detail": self.text(message)}]
            return self._dispatch(message)

        error = data["error"]
        if isinstance(error, Mapping):
            return [self._convert_error_object(error)]
        if isinstance(error, _SCALAR_TYPES):
            return [{"detail": self.text(error)}]
        return self._dispatch(error)

    def _from_errors_null(self, _: Mapping[str, Any]) -> list[dict[str, Any]]:
        return [{"detail": ERRORS_NULL_DETAIL}]

    def _from_errors_scalar(self, data: Mapping[str, Any]) -> list[dict[str, Any]]:
        return self._from_scalar(data["errors"])

    def _from_validation_map(self, data: Mapping[str, Any]) -> list[dict[str, Any]]:
        fields: Mapping[Any, Any] = data["errors"]
        if not fields:
            return [{"detail": DEFAULT_DETAIL}]

        errors: list[dict[str, Any]] = []
        for field, messages in fields.items():
            pointer = f"/data/attributes/{field}"
            if isinstance(messages, (list, tuple)):
                for message in messages:
                    errors.append(self._field_error(message, pointer))
            elif messages is not None and isinstance(messages, _SCALAR_TYPES):
                errors.append(self._field_error(messages, pointer))
            else:
                errors.append({"detail": FIELD_VALIDATION_DETAIL})
        return errors

    def _field_error(self, message: object, pointer: str) -> dict[str, Any]:
        if message is None or not isinstance(message, _SCALAR_TYPES):
            detail = FIELD_VALIDATION_DETAIL
        else:
            detail = self.text(message)
        return {"detail": detail, "source": {"pointer": pointer}}

    def _from_error_list(self, data: Mapping[str, Any] | Sequence[Any]) -> list[dict[str, Any]]:
        items = data["errors"] if isinstance(data, Mapping) else data
        if not items:
            return [{"detail": DEFAULT_DETAIL}]

        errors: list[dict[str, Any]] = []
        for item in items:
            if item is None:
                errors.append({"detail": NULL_ENTRY_DETAIL})
            elif isinstance(item, _SCALAR_TYPES):
                errors.append({"detail": self.text(item)})
            elif isinstance(item, Mapping):
                errors.append(self._pass_through(item))
            elif isinstance(item, BaseException):
                errors.extend(self._from_exception(item))
            else:
                errors.append({"detail": UNKNOWN_TYPE_DETAIL})
        return errors

    def _from_error_object(self, data: Mapping[str, Any]) -> list[dict[str, Any]]:
        error = {key: data[key] for key in CANONICAL_ERROR_KEYS if key in data}
        for key in ("status", "code"):
            if isinstance(error.get(key), (int, float)) and not isinstance(error[key], bool):
                error[key] = self.text(error[key])
        if not isinstance(error.get("detail"), str):
            error["detail"] = self._derive_detail(data)
        return [error]

    def _from_other_mapping(self, data: Mapping[str, Any]) -> list[dict[str, Any]]:
        return [{"detail": self._derive_detail(data)}]

    def _from_convertible(self, data: object) -> list[dict[str, Any]]:
        return self._dispatch(_to_mapping(data))

    def _from_unknown(self, _: object) -> list[dict[str, Any]]:
        return [{"detail": UNKNOWN_TYPE_DETAIL}]

    def _pass_through(self, item: Mapping[str, Any]) -> dict[str, Any]:
        """Copy one error-shaped mapping unchanged except for a missing ``detail``."""
        error = dict(item)
        if not isinstance(error.get("detail"), str):
            if error.get("detail") is not None and isinstance(error["detail"], _SCALAR_TYPES):
                error["detail"] = self.text(error["detail"])
            elif error.get("message") is not None:
                error["detail"] = self.text(error["message"])
            else:
                error["detail"] = self._derive_detail(item)
        return error

    def _convert_error_object(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Map a non-canonical ``{"message", "code"}`` object onto canonical keys."""
        error: dict[str, Any] = {}
        for key, value in data.items():
            if key == "message":
                error["detail"] = value if isinstance(value, str) else self.text(value)
            elif key in ("code", "status") and _is_numeric(value):
                error[key] = self.text(value)
            else:
                error[key] = value
        if not isinstance(error.get("detail"), str):
            error["detail"] = self._derive_detail(data)
        return error

    def _derive_detail(self, data: Mapping[str, Any]) -> str:
        for key in _FALLBACK_DETAIL_KEYS:
            value = data.get(key)
            if isinstance(value, str):
                return value
        for value in data.values():
            if value is not None and isinstance(value, _SCALAR_TYPES):
                return self.text(value)
        return DEFAULT_DETAIL


def _is_numeric(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and value.strip().lstrip("-").replace(".", "", 1).isdigit()


def _exception_code(exc: BaseException) -> str | None:
    for attribute in ("status_code", "code"):
        value = getattr(exc, attribute, None)
        if isinstance(value, int) and not isinstance(value, bool) and value != 0:
            return str(value)
    return None


def _to_mapping(data: object) -> dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="python")
    if is_dataclass(data) and not isinstance(data, type):
        return asdict(data)
    return {key: value for key, value in vars(data).items() if not key.startswith("_")}
