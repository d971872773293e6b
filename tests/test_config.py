"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from clustersync.config import (
    ClusterSyncSettings,
    GateConfig,
    PollerConfig,
    PortsConfig,
    get_settings,
    load_config,
    use_settings,
)
from pydantic import ValidationError


class TestDefaults:
    def test_settings_defaults(self) -> None:
        settings = ClusterSyncSettings()
        assert settings.poller.timeout_s == 15.0
        assert settings.gate.scheduling_timeout_s == 10.0
        assert settings.gate.effect_timeout_s == 100.0
        assert settings.ports.default_bind_host == "127.0.0.1"
        assert settings.ports.backlog == 50
        assert settings.logging.level == "INFO"

    def test_poller_budget_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            PollerConfig(timeout_s=0)
        with pytest.raises(ValidationError):
            PollerConfig(interval_s=-0.1)

    def test_gate_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            GateConfig(scheduling_timeout_s=0)

    def test_backlog_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            PortsConfig(backlog=0)


class TestLoadConfig:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="config file not found"):
            load_config(tmp_path / "absent.yaml")

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="top-level mapping"):
            load_config(path)

    def test_section_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.yaml"
        path.write_text("clustersync: 3\n", encoding="utf-8")
        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(path)

    def test_reads_section(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.yaml"
        path.write_text(
            "clustersync:\n"
            "  gate:\n"
            "    scheduling_timeout_s: 2.5\n"
            "  ports:\n"
            "    default_bind_host: 0.0.0.0\n",
            encoding="utf-8",
        )

        settings = load_config(path)

        assert settings.gate.scheduling_timeout_s == 2.5
        assert settings.ports.default_bind_host == "0.0.0.0"
        assert settings.poller.interval_s == 0.02

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == ClusterSyncSettings()

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "cfg.yaml"
        path.write_text("ports:\n  backlog: 10\n", encoding="utf-8")
        monkeypatch.setenv("CLUSTERSYNC_PORTS__BACKLOG", "128")
        monkeypatch.setenv("CLUSTERSYNC_LOGGING__JSON_OUTPUT", "true")

        settings = load_config(path)

        assert settings.ports.backlog == 128
        assert settings.logging.json_output is True

    def test_env_overrides_only_the_named_field(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = tmp_path / "cfg.yaml"
        path.write_text(
            "gate:\n  scheduling_timeout_s: 3.0\n  poll_interval_s: 0.5\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("CLUSTERSYNC_GATE__SCHEDULING_TIMEOUT_S", "7")

        settings = load_config(path)

        assert settings.gate.scheduling_timeout_s == 7.0
        assert settings.gate.poll_interval_s == 0.5

    def test_invalid_value_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.yaml"
        path.write_text("poller:\n  timeout_s: -1\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(path)


class TestActiveSettings:
    def test_built_from_environment_on_first_use(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLUSTERSYNC_PORTS__DEFAULT_BIND_HOST", "::1")
        use_settings(None)

        assert get_settings().ports.default_bind_host == "::1"

    def test_cached_until_replaced(self) -> None:
        first = get_settings()
        assert get_settings() is first

        replacement = ClusterSyncSettings(gate=GateConfig(scheduling_timeout_s=1.0))
        use_settings(replacement)

        assert get_settings() is replacement
