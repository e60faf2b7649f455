"""Public API for shared configuration utilities."""

from .loader import load_env_config, load_settings, merge_dicts
from .models import (
    DEFAULT_CONFIG_PATH,
    ENV_PREFIX,
    ComponentsSettings,
    LoggingSettings,
    RuntimeSettings,
    resolve_component_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "ComponentsSettings",
    "LoggingSettings",
    "RuntimeSettings",
    "load_env_config",
    "load_settings",
    "merge_dicts",
    "resolve_component_settings",
]
