"""Safety and length checks for outbound GET request paths."""

from __future__ import annotations

import re
from urllib.parse import unquote_plus

_TRAVERSAL_PATTERNS = (
    "../",
    "..\\",
    "%2e%2e%2f",
    "%2e%2e%5c",
    "..%2f",
    "..%5c",
    "%252e%252e%252f",
    "..%252f",
    "..%255c",
)
_INJECTION_PATTERN = re.compile(
    r"[<>\"'`]"
    r"|(?:javascript|data|vbscript|file|about|chrome):"
    r"|\b(?:ms|moz|opera|webkit)-[a-z0-9-]*:",
    re.IGNORECASE,
)
_ALLOWED_CHARACTERS = re.compile(r"^[a-zA-Z0-9\-_.~/:?@&=\[\]%!$()*+,;]+$")
_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def is_valid_url_path(path: str) -> bool:
    """Return whether ``path`` is safe to append to the service base URI."""
    if path.strip() == "":
        return False
    if "\0" in path:
        return False

    lowered = path.lower()
    if any(pattern in lowered for pattern in _TRAVERSAL_PATTERNS):
        return False
    if _INJECTION_PATTERN.search(path):
        return False

    decoded = unquote_plus(path)
    if decoded != path and unquote_plus(decoded) != decoded:
        return False

    if not _ALLOWED_CHARACTERS.match(path):
        return False

    remainder = _ABSOLUTE_URL.sub("", path, count=1)
    return "//" not in remainder


def allowed_get_request(path: str, *, base_uri: str, max_url_length: int) -> bool:
    """Return whether ``path`` is safe and fits within ``max_url_length``."""
    if not is_valid_url_path(path):
        return False
    return len(path) < max_url_length - len(base_uri)
