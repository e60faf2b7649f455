"""Document transports used by remote repositories."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

import httpx

from packages.remote_shared.http import HttpClient, HttpJsonDecodeError, decode_json, status_error

from .document import Document
from .errors import DocumentParseError


@runtime_checkable
class DocumentTransport(Protocol):
    """GET/POST access to a JSON:API service rooted at ``base_url``.

    Implementations return a parsed ``Document`` (including documents that
    report errors) or raise a transport error: ``HttpRequestError`` when the
    service cannot be reached, ``HttpStatusError`` for error statuses without
    a document body, and ``DocumentParseError`` for successful responses that
    are not documents.
    """

    @property
    def base_url(self) -> str:
        """Return the service base URL."""

    def get(self, url: str, headers: Mapping[str, str]) -> Document:
        """Fetch one document."""

    def post(self, url: str, body: Mapping[str, Any], headers: Mapping[str, str]) -> Document:
        """Send one document and return the response document."""


class HttpDocumentTransport:
    """``DocumentTransport`` backed by the shared ``HttpClient``."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        client: HttpClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or HttpClient(
            base_url=self._base_url,
            timeout_seconds=timeout_seconds,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        """Close the underlying client when this transport created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpDocumentTransport:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def get(self, url: str, headers: Mapping[str, str]) -> Document:
        response = self._client.get(url, headers=dict(headers), raise_for_status=False)
        return self._to_document(response)

    def post(self, url: str, body: Mapping[str, Any], headers: Mapping[str, str]) -> Document:
        response = self._client.post(
            url,
            json=dict(body),
            headers=dict(headers),
            raise_for_status=False,
        )
        return self._to_document(response)

    def _to_document(self, response: httpx.Response) -> Document:
        if not response.content:
            if response.is_error:
                raise status_error(response)
            return Document(status_code=response.status_code)

        try:
            payload = decode_json(response)
        except HttpJsonDecodeError as exc:
            if response.is_error:
                raise status_error(response) from exc
            raise DocumentParseError(
                message="Remote service returned invalid response format",
                status_code=response.status_code,
                payload=exc.response_body,
            ) from exc

        try:
            return Document.from_payload(payload, status_code=response.status_code)
        except DocumentParseError as exc:
            if response.is_error:
                raise status_error(response) from exc
            raise
