"""Application configuration models for the Camunda exporter.

Settings are grouped into small pydantic models (server, scheduler,
collection, logging) nested inside the main ``Settings`` class. Values are
loaded, in order of precedence, from keyword arguments (the CLI passes its
flags this way), environment variables such as
``CAMUNDA_EXPORTER_SERVER__URL``, and finally a YAML file.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Type

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_HOST,
    DEFAULT_INCIDENT_STATUSES,
    DEFAULT_LONG_INTERVAL,
    DEFAULT_PORT,
    DEFAULT_REST_PREFIX,
    DEFAULT_SHORT_INTERVAL,
    ENV_PREFIX,
    REQUEST_TIMEOUT_SECONDS,
)
from .exceptions import ConfigError
from .models import ActivityCounter
from .utils import parse_duration

logger = logging.getLogger(__name__)


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """
    A Pydantic settings source that loads variables from a YAML file.
    """

    def __init__(self, settings_cls: Type[BaseSettings], yaml_file: Path | None):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._data: dict[str, Any] = {}
        if self.yaml_file and self.yaml_file.exists():
            try:
                self._data = yaml.safe_load(self.yaml_file.read_text()) or {}
            except (yaml.YAMLError, IOError) as exc:
                raise ConfigError(f"Could not read {self.yaml_file}: {exc}") from exc
            if not isinstance(self._data, dict):
                raise ConfigError(f"{self.yaml_file} must contain a mapping")

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str] | None:
        if not self._data:
            return None
        return (self._data.get(field_name), field_name)

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class ServerSettings(BaseModel):
    """Where the Camunda REST API lives and how to authenticate against it."""

    url: Optional[str] = Field(None, description="Base URL of the Camunda server.")
    rest_prefix: str = Field(
        DEFAULT_REST_PREFIX,
        description="Path prefix of the REST API ('engine-rest' on older distributions).",
    )
    user: Optional[str] = Field(None, description="Basic-auth user name.")
    password: Optional[str] = Field(None, description="Basic-auth password.")
    timeout: float = Field(
        REQUEST_TIMEOUT_SECONDS, description="Total timeout of one REST request in seconds."
    )


class SchedulerSettings(BaseModel):
    """Polling cadences, in seconds. Go-style strings such as '30s' are accepted."""

    short_interval: float = Field(
        DEFAULT_SHORT_INTERVAL,
        description="Interval between two incident/statistics collections.",
    )
    long_interval: float = Field(
        DEFAULT_LONG_INTERVAL,
        description="Interval between two engine metrics collections.",
    )

    @field_validator("short_interval", "long_interval", mode="before")
    @classmethod
    def _parse_interval(cls, value: Any) -> float:
        try:
            return parse_duration(value)
        except ConfigError as exc:
            raise ValueError(str(exc)) from exc


class CollectionSettings(BaseModel):
    """Feature toggles and static data for the collectors."""

    fetch_runtime: bool = Field(
        False, description="Collect process definition and activity runtime statistics."
    )
    fetch_history: bool = Field(
        False,
        description="Collect history incidents, history activity statistics and named activities.",
    )
    fetch_metrics: bool = Field(False, description="Collect engine metrics.")
    incident_statuses: List[str] = Field(
        default_factory=lambda: list(DEFAULT_INCIDENT_STATUSES),
        description="Incident states counted through /history/incident/count.",
    )
    activities: List[ActivityCounter] = Field(
        default_factory=list,
        description="Named activities whose history instance count is exported.",
    )

    @field_validator("incident_statuses", mode="before")
    @classmethod
    def _split_statuses(cls, value: Any) -> Any:
        """Allow a comma separated string."""
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value


class LoggingSettings(BaseModel):
    level: str = Field("INFO", description="Root log level.")
    verbose: bool = Field(False, description="Log every collected value (forces DEBUG).")
    file: Optional[Path] = Field(None, description="Optional log file.")
    mask_sensitive: bool = Field(
        True, description="Mask credentials in log records."
    )


class ExporterSettings(BaseModel):
    host: str = Field(DEFAULT_HOST, description="Bind address of the /metrics endpoint.")
    port: int = Field(DEFAULT_PORT, description="Port of the /metrics endpoint.")


class Settings(BaseSettings):
    """
    Main application configuration model.
    """

    server: ServerSettings = Field(default_factory=ServerSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    collection: CollectionSettings = Field(default_factory=CollectionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    exporter: ExporterSettings = Field(default_factory=ExporterSettings)

    config_file: Optional[Path] = Field(default=None, exclude=True)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX, case_sensitive=False, env_nested_delimiter="__"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        config_file = init_settings.init_kwargs.get("config_file")
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=config_file),
            file_secret_settings,
        )


def load_config(path: Path | None = None, **overrides: Any) -> Settings:
    """
    Load application settings from a YAML file and environment variables.

    ``overrides`` are passed to ``Settings`` as init values and win over every
    other source; nested groups must be given as dictionaries.
    """
    config_file = path
    if config_file is None:
        if DEFAULT_CONFIG_FILE.exists():
            config_file = DEFAULT_CONFIG_FILE
    elif not config_file.exists():
        raise ConfigError(f"Configuration file not found: {config_file}")
    if config_file is not None:
        logger.debug("Loading configuration from %s", config_file)
    return Settings(config_file=config_file, **overrides)
