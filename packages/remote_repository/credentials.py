"""Bearer token resolution for remote repositories."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .errors import CredentialError


@runtime_checkable
class TokenProvider(Protocol):
    """Source of bearer credentials for remote calls."""

    def get_token(self) -> str:
        """Return a bearer token for the next request."""


class StaticTokenProvider:
    """Token provider returning one fixed token."""

    def __init__(self, token: str) -> None:
        self._token = token

    def get_token(self) -> str:
        return self._token


def require_token_provider(provider: object) -> TokenProvider:
    """Return ``provider`` when it exposes a callable ``get_token``."""
    if not callable(getattr(provider, "get_token", None)):
        raise TypeError(
            f"{type(provider).__name__} must implement get_token() to be used as a token provider"
        )
    return provider  # type: ignore[return-value]


class BearerCredential:
    """Lazily resolved bearer token.

    The provider is consulted on first use only; the validated token is reused
    for the lifetime of the owning repository.
    """

    def __init__(self, provider: TokenProvider) -> None:
        self._provider = require_token_provider(provider)
        self._token: str | None = None

    @property
    def resolved(self) -> bool:
        return self._token is not None

    def token(self) -> str:
        if self._token is None:
            self._token = self._load()
        return self._token

    def authorization_header(self) -> str:
        return f"Bearer {self.token()}"

    def _load(self) -> str:
        provider_name = type(self._provider).__name__
        try:
            token = self._provider.get_token()
        except Exception as exc:
            raise CredentialError(
                message=f"Failed to obtain token from {provider_name}: {exc}",
                cause=exc,
            ) from exc

        if not isinstance(token, str) or token.strip() == "":
            raise CredentialError(
                message=f"{provider_name} returned an invalid token: expected a non-empty string"
            )
        return token.strip()
