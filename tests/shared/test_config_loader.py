"""Tests for pydantic-settings-backed configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.remote_repository.config import (
    RemoteRepositorySettings,
    resolve_remote_repository_settings,
)
from packages.remote_repository.failures import FailureCategory
from packages.remote_shared.config import load_env_config, load_settings, merge_dicts


def test_load_settings_applies_precedence_cascade(tmp_path: Path) -> None:
    """Init params should override env, env should override YAML, then defaults."""
    config_file = tmp_path / "remote.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "components:",
                "  remote_repository:",
                "    base_uri: https://yaml.example.test",
                "    retry_attempts: 3",
                "    max_url_length: 1024",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(
        cli_params={"logging": {"level": "DEBUG"}},
        environ={
            "REMOTE_LOGGING__LEVEL": "ERROR",
            "REMOTE_COMPONENTS__REMOTE_REPOSITORY__RETRY_ATTEMPTS": "2",
            "UNRELATED": "ignored",
        },
        config_path=config_file,
    )
    repository = resolve_remote_repository_settings(settings)

    assert settings.logging.level == "DEBUG"
    assert repository.retry_attempts == 2
    assert repository.max_url_length == 1024
    assert repository.base_uri == "https://yaml.example.test"


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    """Settings should fall back to model defaults when env and YAML are absent."""
    settings = load_settings(config_path=tmp_path / "missing.yaml", environ={})
    repository = resolve_remote_repository_settings(settings)

    assert settings.logging.level == "INFO"
    assert settings.logging.service == "remote-repository"
    assert repository.max_url_length == 2048
    assert repository.retry_attempts == 1
    assert repository.log_requests is False
    assert repository.recoverable_error_patterns == (
        "Duplicate active delivery address codes found",
    )


def test_load_env_config_coerces_scalars_and_nests_keys() -> None:
    """Prefixed env vars should become nested, typed config values."""
    loaded = load_env_config(
        environ={
            "REMOTE_COMPONENTS__REMOTE_REPOSITORY__LOG_REQUESTS": "true",
            "REMOTE_COMPONENTS__REMOTE_REPOSITORY__RETRY_BACKOFF_SECONDS": "0.5",
            "REMOTE_COMPONENTS__REMOTE_REPOSITORY__RECOVERABLE_ERROR_PATTERNS": '["a", "b"]',
            "REMOTE_LOGGING__SERVICE": "orders",
        }
    )

    assert loaded == {
        "components": {
            "remote_repository": {
                "log_requests": True,
                "retry_backoff_seconds": 0.5,
                "recoverable_error_patterns": ["a", "b"],
            }
        },
        "logging": {"service": "orders"},
    }


def test_merge_dicts_prefers_override_recursively() -> None:
    """merge_dicts should merge nested mappings key by key."""
    merged = merge_dicts({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}, "d": 4})
    assert merged == {"a": {"b": 1, "c": 3}, "d": 4}


def test_repository_settings_parse_category_ttls_and_trim_base_uri() -> None:
    """Category TTL keys should parse from strings and base URIs lose trailing slashes."""
    settings = RemoteRepositorySettings.model_validate(
        {
            "base_uri": " https://api.example.test/ ",
            "negative_cache_ttl_by_category": {"timeout": 5, "not_found": 3600},
            "recoverable_error_patterns": ["", "benign"],
        }
    )

    assert settings.base_uri == "https://api.example.test"
    assert settings.negative_cache_ttl_by_category == {
        FailureCategory.TIMEOUT: 5.0,
        FailureCategory.NOT_FOUND: 3600.0,
    }
    assert settings.recoverable_error_patterns == ("benign",)


def test_repository_settings_reject_unknown_keys_and_negative_values() -> None:
    """Repository settings should be strict about typos and negative budgets."""
    with pytest.raises(ValidationError):
        RemoteRepositorySettings.model_validate({"retry_attempt": 2})
    with pytest.raises(ValidationError):
        RemoteRepositorySettings.model_validate({"retry_attempts": -1})
    with pytest.raises(ValidationError):
        RemoteRepositorySettings.model_validate(
            {"negative_cache_ttl_by_category": {"timeout": -1}}
        )
