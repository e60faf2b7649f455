"""Tests for outbound GET path safety and length checks."""

from __future__ import annotations

import pytest

from packages.remote_repository import allowed_get_request, is_valid_url_path


@pytest.mark.parametrize(
    "path",
    [
        "/v1/organisations",
        "/v1/organisations?filter[id]=a,b&page[size]=50",
        "/v1/items-list",
        "/v1/search?q=a%20b",
        "/v1/search?q=a+b",
        "https://api.example.test/v1/organisations",
        "/v1/users/me@example.test",
    ],
)
def test_is_valid_url_path_accepts_safe_paths(path: str) -> None:
    """Ordinary paths and query strings should be accepted."""
    assert is_valid_url_path(path) is True


@pytest.mark.parametrize(
    "path",
    [
        "",
        "   ",
        "/v1/a\0b",
        "/v1/../admin",
        "/v1/..\\admin",
        "/v1/%2e%2e%2fadmin",
        "/v1/..%2fadmin",
        "/v1/<script>",
        "/v1/x?name=\"quoted\"",
        "/v1/x?cb=javascript:alert(1)",
        "/v1/x?u=data:text/html",
        "/v1/moz-extension:thing",
        "/v1/search?q=%2541",
        "/v1/a b",
        "/v1//organisations",
        "https://api.example.test//organisations",
    ],
)
def test_is_valid_url_path_rejects_unsafe_paths(path: str) -> None:
    """Traversal, injection, double encoding, and empty segments should be rejected."""
    assert is_valid_url_path(path) is False


def test_allowed_get_request_enforces_length_budget() -> None:
    """Paths must be strictly shorter than the budget left after the base URI."""
    base_uri = "https://api.example.test"
    max_url_length = len(base_uri) + 40

    assert allowed_get_request("/" + "a" * 38, base_uri=base_uri, max_url_length=max_url_length)
    assert not allowed_get_request(
        "/" + "a" * 39, base_uri=base_uri, max_url_length=max_url_length
    )
    assert not allowed_get_request("/../x", base_uri=base_uri, max_url_length=max_url_length)
