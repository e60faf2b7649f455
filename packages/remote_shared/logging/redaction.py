"""Header redaction for request logging."""

from __future__ import annotations

from typing import Mapping

REDACTED = "[REDACTED]"
SENSITIVE_HEADERS = frozenset(
    {"authorization", "proxy-authorization", "cookie", "set-cookie", "x-api-key"}
)


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of ``headers`` with credential-bearing values masked.

    Bearer tokens keep their scheme so logs still show which auth style was
    sent.
    """
    redacted: dict[str, str] = {}
    for name, value in headers.items():
        if name.lower() not in SENSITIVE_HEADERS:
            redacted[name] = value
            continue
        scheme, separator, _ = value.partition(" ")
        redacted[name] = f"{scheme} {REDACTED}" if separator else REDACTED
    return redacted
