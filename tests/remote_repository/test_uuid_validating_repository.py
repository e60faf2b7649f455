"""Tests for repositories that only query canonical UUIDs."""

from __future__ import annotations

from tests.remote_repository.repository_helpers import (
    ORG_A,
    ORG_B,
    UuidOrganisationRepository,
    build_repository,
    document,
    resource,
)


def test_invalid_ids_are_dropped_and_reported() -> None:
    """Malformed ids should be filtered before the request and reported once."""
    repository, transport, observer, _, _ = build_repository(
        document(resource(ORG_A), resource(ORG_B)),
        repository_cls=UuidOrganisationRepository,
    )

    result = repository.find_by_ids(["not-a-uuid", ORG_A, "12345", ORG_B])

    assert list(result) == [ORG_A, ORG_B]
    assert [call["url"] for call in transport.calls] == [
        f"/v1/organisations?filter[id]={ORG_A},{ORG_B}"
    ]
    rejected = observer.events["rejected"]
    assert len(rejected) == 1
    assert rejected[0].invalid_ids == ("not-a-uuid", "12345")
    assert rejected[0].valid_count == 2
    assert rejected[0].total_count == 4


def test_all_invalid_ids_make_no_request_and_are_not_negative_cached() -> None:
    """Rejected ids should never reach the transport or the negative cache."""
    repository, transport, observer, _, _ = build_repository(
        repository_cls=UuidOrganisationRepository,
    )

    assert repository.find_by_ids(["bad-1", "bad-2"]) == {}
    assert transport.calls == []
    assert len(repository.negative_cache) == 0
    assert observer.events["rejected"][0].invalid_ids == ("bad-1", "bad-2")


def test_valid_ids_do_not_emit_rejection_events() -> None:
    """No rejection event should be emitted when every id is valid."""
    repository, _, observer, _, _ = build_repository(
        document(resource(ORG_A)),
        repository_cls=UuidOrganisationRepository,
    )

    repository.find_by_ids([ORG_A])

    assert observer.events["rejected"] == []


def test_find_by_id_with_malformed_id_returns_none() -> None:
    """A single malformed id should resolve to None without a request."""
    repository, transport, _, _, _ = build_repository(repository_cls=UuidOrganisationRepository)

    assert repository.find_by_id("not-a-uuid") is None
    assert transport.calls == []
