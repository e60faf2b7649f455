"""Public shared HTTP client API."""

from .client import HttpClient, decode_json, request_error, status_error
from .errors import (
    HttpClientError,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
)

__all__ = [
    "HttpClient",
    "HttpClientError",
    "HttpJsonDecodeError",
    "HttpRequestError",
    "HttpStatusError",
    "decode_json",
    "request_error",
    "status_error",
]
