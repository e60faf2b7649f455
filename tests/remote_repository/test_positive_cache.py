"""Tests for the per-unit-of-work entity cache."""

from __future__ import annotations

from packages.remote_repository import Entity, PositiveCache


def test_put_and_get_entities() -> None:
    """Stored entities should be retrievable by id."""
    cache = PositiveCache()
    entity = Entity(id="a", type="organisations", attributes={"name": "Acme"})

    cache.put(entity)

    assert cache.get("a") is entity
    assert cache.has("a") is True
    assert "a" in cache
    assert cache.get("missing") is None


def test_put_replaces_existing_entity() -> None:
    """A fresh copy of an entity should replace the cached one."""
    cache = PositiveCache()
    cache.put(Entity(id="a", attributes={"name": "Old"}))
    cache.put(Entity(id="a", attributes={"name": "New"}))

    assert len(cache) == 1
    assert cache.get("a").get("name") == "New"  # type: ignore[union-attr]


def test_only_returns_hits_in_request_order() -> None:
    """only() should follow the requested id order and skip misses."""
    cache = PositiveCache()
    cache.put_many([Entity(id="a"), Entity(id="b"), Entity(id="c")])

    assert list(cache.only(["c", "missing", "a"])) == ["c", "a"]


def test_forget_and_clear() -> None:
    """Entities can be dropped individually or together."""
    cache = PositiveCache()
    cache.put_many([Entity(id="a"), Entity(id="b")])

    cache.forget("a")
    assert list(cache) == ["b"]

    cache.clear()
    assert len(cache) == 0
