"""Pydantic settings for remote repositories."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.remote_shared.config import RuntimeSettings, resolve_component_settings

from .failures import FailureCategory

COMPONENT_ID = "remote_repository"
DEFAULT_RECOVERABLE_ERROR_PATTERNS = ("Duplicate active delivery address codes found",)
DEFAULT_NEGATIVE_CACHE_TTL_BY_CATEGORY: dict[FailureCategory, float] = {
    FailureCategory.NOT_FOUND: 600.0,
    FailureCategory.AUTH_ERROR: 900.0,
    FailureCategory.CLIENT_ERROR: 600.0,
    FailureCategory.SERVER_ERROR: 60.0,
    FailureCategory.RATE_LIMITED: 30.0,
    FailureCategory.TIMEOUT: 15.0,
    FailureCategory.CONNECTION_ERROR: 15.0,
}


class RemoteRepositorySettings(BaseModel):
    """Runtime settings for remote repository calls and caching."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_uri: str = ""
    max_url_length: int = Field(default=2048, gt=0)
    timeout_seconds: float = Field(default=10.0, gt=0)
    log_requests: bool = False
    recoverable_error_patterns: tuple[str, ...] = DEFAULT_RECOVERABLE_ERROR_PATTERNS
    retry_attempts: int = Field(default=1, ge=0)
    retry_backoff_seconds: float = Field(default=1.0, ge=0)
    include_stack_trace_in_errors: bool = False
    legacy_bool_coercion: bool = True
    negative_cache_default_ttl_seconds: float = Field(default=120.0, ge=0)
    negative_cache_ttl_by_category: dict[FailureCategory, float] = Field(
        default_factory=lambda: dict(DEFAULT_NEGATIVE_CACHE_TTL_BY_CATEGORY)
    )
    enable_profiling: bool = False

    @field_validator("base_uri", mode="before")
    @classmethod
    def _strip_base_uri(cls, value: object) -> object:
        """Trim whitespace and trailing slashes from the base URI."""
        if not isinstance(value, str):
            return value
        return value.strip().rstrip("/")

    @field_validator("recoverable_error_patterns", mode="before")
    @classmethod
    def _drop_blank_patterns(cls, value: object) -> object:
        """Ignore empty patterns; an empty substring would match every error."""
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return value
        return tuple(str(item) for item in value if str(item).strip() != "")

    @field_validator("negative_cache_ttl_by_category")
    @classmethod
    def _require_non_negative_ttls(
        cls, value: dict[FailureCategory, float]
    ) -> dict[FailureCategory, float]:
        for category, ttl in value.items():
            if ttl < 0:
                raise ValueError(f"negative cache TTL for {category.value} must be >= 0")
        return value


def resolve_remote_repository_settings(
    settings: RuntimeSettings,
) -> RemoteRepositorySettings:
    """Resolve repository settings from ``components.remote_repository``."""
    return resolve_component_settings(
        settings=settings,
        component_id=COMPONENT_ID,
        model=RemoteRepositorySettings,
    )
