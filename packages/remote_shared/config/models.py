"""Typed configuration models for remote repository runtime settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "remote" / "remote.yaml"
ENV_PREFIX = "REMOTE_"


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "remote-repository"
    environment: str = "dev"


class ComponentsSettings(BaseModel):
    """Open ``components`` subtree; each component validates its own slice."""

    model_config = ConfigDict(extra="allow")


class RuntimeSettings(BaseSettings):
    """Root runtime settings resolved from init/yaml/defaults sources.

    Environment variables are folded into init params by ``load_settings`` so
    callers can supply an explicit environment mapping.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        nested_model_default_partial_update=True,
        yaml_file=str(DEFAULT_CONFIG_PATH),
        yaml_file_encoding="utf-8",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init (cli + env) > yaml > model defaults."""
        return (init_settings, YamlConfigSettingsSource(settings_cls))


TComponentSettings = TypeVar("TComponentSettings", bound=BaseModel)


def resolve_component_settings(
    *,
    settings: RuntimeSettings,
    component_id: str,
    model: type[TComponentSettings],
) -> TComponentSettings:
    """Resolve one component settings object from ``components.<component_id>``."""
    raw_components = settings.components.model_dump(mode="python")
    resolved = raw_components.get(component_id, {})
    if resolved is None:
        resolved = {}
    if not isinstance(resolved, dict):
        raise TypeError(f"components.{component_id} must resolve to an object mapping")
    return model.model_validate(resolved)
