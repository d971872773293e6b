"""Settings for waits, triggers, port reservation and logging.

Values come from an optional YAML file, overridden by ``CLUSTERSYNC_*``
environment variables (``CLUSTERSYNC_GATE__SCHEDULING_TIMEOUT_S=2``). The
active settings are process-wide: components that were not handed an
explicit config section read theirs from ``get_settings()`` when they run.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_CONFIG_PATH = "config/clustersync.yaml"


class PollerConfig(BaseModel):
    """Defaults for bounded waits when a caller does not pass its own budget."""

    timeout_s: float = Field(default=15.0, gt=0)
    interval_s: float = Field(default=0.02, gt=0)


class GateConfig(BaseModel):
    """Budgets used by the synchronization gate.

    ``scheduling_timeout_s`` bounds how long a trigger waits for the scheduler
    to pick the request up. ``effect_timeout_s`` is the default budget for the
    observe step between two triggers.
    """

    scheduling_timeout_s: float = Field(default=10.0, gt=0)
    poll_interval_s: float = Field(default=0.01, gt=0)
    effect_timeout_s: float = Field(default=100.0, gt=0)


class PortsConfig(BaseModel):
    default_bind_host: str = "127.0.0.1"
    backlog: int = Field(default=50, ge=1)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class ClusterSyncSettings(BaseSettings):
    poller: PollerConfig = Field(default_factory=PollerConfig)
    gate: GateConfig = Field(default_factory=GateConfig)
    ports: PortsConfig = Field(default_factory=PortsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="CLUSTERSYNC_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment first: it overrides values read from a config file.
        return env_settings, init_settings


def _read_section(config_path: Path) -> dict[str, Any]:
    document = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(document, dict):
        raise ValueError("config file must contain a top-level mapping")

    section = document.get("clustersync", document)
    if not isinstance(section, dict):
        raise ValueError("clustersync config section must be a mapping")
    return section


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> ClusterSyncSettings:
    """Read settings from a YAML file; ``CLUSTERSYNC_*`` variables win."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")
    return ClusterSyncSettings(**_read_section(config_path))


_active_settings: ClusterSyncSettings | None = None
_settings_lock = threading.Lock()


def get_settings() -> ClusterSyncSettings:
    """Return the active settings, built from the environment on first use."""
    global _active_settings
    with _settings_lock:
        if _active_settings is None:
            _active_settings = ClusterSyncSettings()
        return _active_settings


def use_settings(settings: ClusterSyncSettings | None) -> None:
    """Install ``settings`` as the active settings.

    ``None`` drops the current ones; the next ``get_settings()`` call reads
    the environment again.
    """
    global _active_settings
    with _settings_lock:
        _active_settings = settings


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ClusterSyncSettings",
    "GateConfig",
    "LoggingConfig",
    "PollerConfig",
    "PortsConfig",
    "get_settings",
    "load_config",
    "use_settings",
]
