"""Synchronous httpx wrapper used by remote document transports.

Every failure leaves this module as one of the typed errors in ``errors``:
transport problems become ``HttpRequestError``, error statuses become
``HttpStatusError`` (unless the caller asks for the raw response), and
undecodable bodies become ``HttpJsonDecodeError``.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

import httpx

from packages.remote_shared.logging import fields, get_logger, log_context

from .errors import HttpJsonDecodeError, HttpRequestError, HttpStatusError

_LOGGER = get_logger(__name__)


def status_error(response: httpx.Response) -> HttpStatusError:
    """Build a typed status error from one HTTP response."""
    request = response.request
    return HttpStatusError(
        message=f"HTTP {response.status_code} for {request.method} {request.url}",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
        response_body=_body_text(response),
        response_headers=dict(response.headers.items()),
    )


def request_error(exc: httpx.RequestError, *, method: str, url: str) -> HttpRequestError:
    """Build a typed transport error, preferring the request httpx bound to ``exc``."""
    try:
        bound: httpx.Request | None = exc.request
    except RuntimeError:
        bound = None
    if bound is not None:
        method, url = bound.method, str(bound.url)
    return HttpRequestError(
        message=f"HTTP request failed for {method.upper()} {url}",
        method=method.upper(),
        url=url,
        cause=exc,
        timed_out=isinstance(exc, httpx.TimeoutException),
    )


def decode_json(response: httpx.Response) -> Any:
    """Decode one response body as JSON or raise ``HttpJsonDecodeError``."""
    try:
        return response.json()
    except ValueError as exc:
        request = response.request
        raise HttpJsonDecodeError(
            message=f"Invalid JSON response for {request.method} {request.url}",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            response_body=_body_text(response),
            cause=exc,
        ) from exc


class HttpClient:
    """Thin synchronous wrapper over ``httpx.Client`` with typed failures."""

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
        transport: httpx.BaseTransport | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=dict(headers or {}),
            follow_redirects=follow_redirects,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    def close(self) -> None:
        """Close the underlying ``httpx.Client`` when this wrapper created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request; error statuses raise unless ``raise_for_status`` is off."""
        started = time.perf_counter()
        try:
            response = self._client.request(method=method, url=url, **kwargs)
        except httpx.RequestError as exc:
            raise request_error(exc, method=method, url=url) from exc

        with log_context(
            {
                fields.API_METHOD: method.upper(),
                fields.API_ENDPOINT: url,
                fields.API_STATUS: response.status_code,
                fields.DURATION_MS: round((time.perf_counter() - started) * 1000.0, 3),
            }
        ):
            _LOGGER.debug("HTTP response received")

        if raise_for_status and response.is_error:
            raise status_error(response)
        return response

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", url, **kwargs)


def _body_text(response: httpx.Response) -> str:
    try:
        return response.text
    except UnicodeDecodeError:
        return ""
