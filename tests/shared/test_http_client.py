"""Unit tests for the shared HTTP client wrapper."""

from __future__ import annotations

import json

import httpx
import pytest

from packages.remote_shared.http import (
    HttpClient,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
    decode_json,
)


def _client(handler) -> HttpClient:
    return HttpClient(
        base_url="https://example.test",
        transport=httpx.MockTransport(handler),
    )


def test_decode_json_returns_decoded_payload() -> None:
    """decode_json should return the JSON content of a response."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": []}, request=request)

    with _client(handler) as client:
        assert decode_json(client.get("/v1/items")) == {"data": []}


def test_http_client_maps_status_failure_to_typed_error() -> None:
    """HttpClient should raise HttpStatusError on non-2xx status codes."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpStatusError) as exc_info:
            client.get("/v1/items")

    error = exc_info.value
    assert error.method == "GET"
    assert error.status_code == 503
    assert error.response_body == "unavailable"


def test_http_client_keeps_response_headers_on_status_errors() -> None:
    """Status errors should carry the response headers and request line."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404, text="missing", headers={"x-request-id": "abc"}, request=request
        )

    with _client(handler) as client:
        with pytest.raises(HttpStatusError) as exc_info:
            client.get("/v1/items/1")

    assert exc_info.value.response_headers["x-request-id"] == "abc"
    assert exc_info.value.request_line == "GET https://example.test/v1/items/1"


def test_http_client_returns_error_response_when_status_check_disabled() -> None:
    """raise_for_status=False should hand error responses back to the caller."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"errors": []}, request=request)

    with _client(handler) as client:
        response = client.get("/v1/items", raise_for_status=False)

    assert response.status_code == 422


def test_http_client_maps_transport_failure_to_typed_error() -> None:
    """HttpClient should raise HttpRequestError on transport failures."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection failed", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpRequestError) as exc_info:
            client.get("/v1/items")

    error = exc_info.value
    assert error.method == "GET"
    assert error.url == "https://example.test/v1/items"
    assert error.request_line == "GET https://example.test/v1/items"
    assert error.timed_out is False
    assert isinstance(error.cause, httpx.ConnectError)


def test_http_client_flags_timeouts() -> None:
    """Timeout transport failures should set timed_out on the typed error."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpRequestError) as exc_info:
            client.get("/v1/items")

    assert exc_info.value.timed_out is True


def test_http_client_maps_json_decode_failure_to_typed_error() -> None:
    """HttpClient should raise HttpJsonDecodeError for invalid JSON payloads."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not-json", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpJsonDecodeError) as exc_info:
            decode_json(client.get("/v1/items"))

    error = exc_info.value
    assert error.status_code == 200
    assert error.method == "GET"
    assert error.response_body == "not-json"


def test_http_client_post_sends_json_body() -> None:
    """HttpClient.post should send the JSON body it is given."""
    seen: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.content)
        return httpx.Response(201, json={"data": {"id": "1"}}, request=request)

    with _client(handler) as client:
        payload = decode_json(client.post("/v1/items", json={"name": "demo"}))

    assert payload == {"data": {"id": "1"}}
    assert [json.loads(body) for body in seen] == [{"name": "demo"}]
