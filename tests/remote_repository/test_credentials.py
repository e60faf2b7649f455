"""Tests for lazy bearer token resolution."""

from __future__ import annotations

import pytest

from packages.remote_repository import (
    BearerCredential,
    CredentialError,
    StaticTokenProvider,
    TokenProvider,
)
from packages.remote_repository.credentials import require_token_provider
from tests.remote_repository.repository_helpers import CountingTokenProvider


def test_token_is_loaded_once_on_first_use() -> None:
    """The provider should not be called until a token is needed, then only once."""
    provider = CountingTokenProvider(" token-123 ")
    credential = BearerCredential(provider)

    assert provider.calls == 0
    assert credential.resolved is False

    assert credential.authorization_header() == "Bearer token-123"
    assert credential.token() == "token-123"
    assert provider.calls == 1
    assert credential.resolved is True


def test_provider_failure_is_wrapped() -> None:
    """Provider exceptions should surface as CredentialError with the cause kept."""
    cause = RuntimeError("vault sealed")
    credential = BearerCredential(CountingTokenProvider(error=cause))

    with pytest.raises(CredentialError) as exc_info:
        credential.token()

    assert exc_info.value.cause is cause
    assert str(exc_info.value) == (
        "Failed to obtain token from CountingTokenProvider: vault sealed"
    )


@pytest.mark.parametrize("token", ["", "   ", None, 123])
def test_invalid_tokens_are_rejected(token: object) -> None:
    """Empty or non-string tokens should raise CredentialError."""
    credential = BearerCredential(CountingTokenProvider(token))

    with pytest.raises(CredentialError, match="invalid token"):
        credential.token()


def test_require_token_provider_rejects_objects_without_get_token() -> None:
    """Objects lacking get_token should be refused at construction."""
    with pytest.raises(TypeError, match="must implement get_token"):
        require_token_provider(object())
    with pytest.raises(TypeError):
        BearerCredential(object())  # type: ignore[arg-type]


def test_static_token_provider_satisfies_protocol() -> None:
    """StaticTokenProvider should satisfy the TokenProvider protocol."""
    provider = StaticTokenProvider("abc")

    assert isinstance(provider, TokenProvider)
    assert provider.get_token() == "abc"
