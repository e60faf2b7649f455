"""Public API for canonical error normalization."""

from .collection import ErrorCollectionParser
from .normalize import (
    ERRORS_NULL_DETAIL,
    FIELD_VALIDATION_DETAIL,
    NULL_ENTRY_DETAIL,
    UNKNOWN_TYPE_DETAIL,
    ErrorDataNormalizer,
    ErrorShape,
    looks_error_shaped,
    match_error_shape,
)
from .types import (
    CANONICAL_ERROR_KEYS,
    DEFAULT_DETAIL,
    CanonicalError,
    ErrorCollection,
    ErrorSource,
)

__all__ = [
    "CANONICAL_ERROR_KEYS",
    "DEFAULT_DETAIL",
    "ERRORS_NULL_DETAIL",
    "FIELD_VALIDATION_DETAIL",
    "NULL_ENTRY_DETAIL",
    "UNKNOWN_TYPE_DETAIL",
    "CanonicalError",
    "ErrorCollection",
    "ErrorCollectionParser",
    "ErrorDataNormalizer",
    "ErrorShape",
    "ErrorSource",
    "looks_error_shaped",
    "match_error_shape",
]
