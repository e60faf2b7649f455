"""Positive cache of entities retrieved during one unit of work."""

from __future__ import annotations

from typing import Iterable, Iterator

from .document import Entity


class PositiveCache:
    """Entity id to ``Entity`` store.

    Entities are immutable; storing a fresh copy replaces the previous one.
    """

    def __init__(self) -> None:
        self._entities: dict[str, Entity] = {}

    def get(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    def has(self, entity_id: str) -> bool:
        return entity_id in self._entities

    __contains__ = has

    def put(self, entity: Entity) -> None:
        self._entities[entity.id] = entity

    def put_many(self, entities: Iterable[Entity]) -> None:
        for entity in entities:
            self.put(entity)

    def only(self, ids: Iterable[str]) -> dict[str, Entity]:
        """Return cached entities for ``ids`` in request order, skipping misses."""
        return {
            entity_id: self._entities[entity_id]
            for entity_id in ids
            if entity_id in self._entities
        }

    def forget(self, entity_id: str) -> None:
        self._entities.pop(entity_id, None)

    def clear(self) -> None:
        self._entities.clear()

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entities)
