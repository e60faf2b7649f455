"""Remote repository that only queries well-formed UUIDs."""

from __future__ import annotations

from packages.remote_shared.ids import filter_uuids

from .observability import IdsRejected
from .repository import RemoteRepository


class UuidValidatingRemoteRepository(RemoteRepository):
    """Repository whose entity ids are canonical UUIDs.

    Malformed ids are dropped before any cache or network lookup and reported
    through the observer; they are never negative-cached.
    """

    def screen_ids(self, ids: list[str]) -> list[str]:
        result = filter_uuids(ids)
        if result.has_invalid:
            self._observer.on_ids_rejected(
                IdsRejected(
                    repository=self.name,
                    invalid_ids=tuple(str(value) for value in result.invalid),
                    valid_count=len(result.valid),
                    total_count=len(ids),
                )
            )
        return list(result.valid)
