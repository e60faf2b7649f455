"""Adapt normalized error data into ``ErrorCollection`` values."""

from __future__ import annotations

from .normalize import ErrorDataNormalizer
from .types import CanonicalError, ErrorCollection


class ErrorCollectionParser:
    """Parse any error-shaped value into a non-empty ``ErrorCollection``.

    All shape handling lives in ``ErrorDataNormalizer``; this class only turns
    its plain-dict output into canonical error objects.
    """

    def __init__(self, normalizer: ErrorDataNormalizer | None = None) -> None:
        self._normalizer = normalizer or ErrorDataNormalizer()

    @property
    def normalizer(self) -> ErrorDataNormalizer:
        return self._normalizer

    def parse(self, data: object) -> ErrorCollection:
        """Return the canonical error collection for ``data``."""
        drafts = self._normalizer.normalize_errors(data)
        return ErrorCollection(CanonicalError.from_mapping(draft) for draft in drafts)
