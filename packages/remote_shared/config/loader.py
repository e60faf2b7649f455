"""Settings loading with deterministic precedence.

The cascade is always:
1) CLI/init params
2) Environment variables
3) ``~/.config/remote/remote.yaml`` (or an explicit ``config_path``)
4) Model defaults

Environment variable format:
- Prefix: ``REMOTE_``
- Nested keys: ``__`` separator
- Example: ``REMOTE_LOGGING__LEVEL=DEBUG`` -> ``logging.level = "DEBUG"``
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Mapping

from pydantic_settings import SettingsConfigDict

from .models import DEFAULT_CONFIG_PATH, ENV_PREFIX, RuntimeSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
    env_prefix: str = ENV_PREFIX,
) -> RuntimeSettings:
    """Load ``RuntimeSettings`` by applying the standard precedence cascade."""
    env_data = load_env_config(environ=environ, prefix=env_prefix)
    cli_data = _as_plain_dict(cli_params) if cli_params is not None else {}
    init_values = merge_dicts(env_data, cli_data)

    resolved_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    settings_cls = _bind_config_path(resolved_path)
    return settings_cls(**init_values)


def _bind_config_path(path: Path) -> type[RuntimeSettings]:
    """Return a ``RuntimeSettings`` subclass reading YAML from ``path``."""
    if path == DEFAULT_CONFIG_PATH:
        return RuntimeSettings

    class _PathBoundSettings(RuntimeSettings):
        model_config = SettingsConfigDict(yaml_file=str(path))

    return _PathBoundSettings


def load_env_config(
    *, environ: Mapping[str, str] | None, prefix: str = ENV_PREFIX
) -> dict[str, Any]:
    """Extract and map prefixed environment variables into nested config."""
    env = environ if environ is not None else os.environ
    output: dict[str, Any] = {}

    for key, raw_value in env.items():
        if not key.startswith(prefix):
            continue

        path = [
            segment.strip().lower()
            for segment in key[len(prefix) :].split("__")
            if segment.strip()
        ]
        if not path:
            continue

        _set_nested(output, path, _coerce_scalar(raw_value))

    return output


def merge_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge mappings, with ``override`` taking precedence."""
    result = _as_plain_dict(base)
    for key, override_value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(override_value, Mapping):
            result[key] = merge_dicts(base_value, override_value)
            continue
        result[key] = copy.deepcopy(override_value)
    return result


def _set_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    cursor: dict[str, Any] = target
    for segment in path[:-1]:
        child = cursor.get(segment)
        if not isinstance(child, dict):
            child = {}
            cursor[segment] = child
        cursor = child
    cursor[path[-1]] = value


def _coerce_scalar(raw: str) -> Any:
    """Coerce env strings into bool/None/int/float/JSON when unambiguous."""
    value = raw.strip()
    lowered = value.lower()

    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    if value.startswith(("{", "[")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return raw
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return raw


def _as_plain_dict(value: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-copy a mapping into plain ``dict`` values recursively."""
    output: dict[str, Any] = {}
    for key, subvalue in value.items():
        if isinstance(subvalue, Mapping):
            output[str(key)] = _as_plain_dict(subvalue)
        else:
            output[str(key)] = copy.deepcopy(subvalue)
    return output
