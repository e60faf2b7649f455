"""Public identifier validation API."""

from .uuids import UuidFilterResult, filter_uuids, is_uuid

__all__ = ["UuidFilterResult", "filter_uuids", "is_uuid"]
