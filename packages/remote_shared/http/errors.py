"""Typed failures raised by ``HttpClient``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


# Not frozen: contextlib assigns __traceback__ on exceptions leaving a
# @contextmanager block.
@dataclass(eq=False)
class HttpClientError(Exception):
    """One outbound request that did not produce a usable response."""

    message: str
    method: str
    url: str

    def __str__(self) -> str:
        return self.message

    @property
    def request_line(self) -> str:
        return f"{self.method} {self.url}"


@dataclass(eq=False)
class HttpRequestError(HttpClientError):
    """The service could not be reached or did not answer in time."""

    cause: Exception | None = None
    timed_out: bool = False


@dataclass(eq=False)
class HttpStatusError(HttpClientError):
    """The service answered with a 4xx or 5xx status."""

    status_code: int = 0
    response_body: str = ""
    response_headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(eq=False)
class HttpJsonDecodeError(HttpClientError):
    """The response body is not valid JSON."""

    status_code: int = 0
    response_body: str = ""
    cause: Exception | None = None
