from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from clustersync.bootstrap import configure
from clustersync.config import get_settings
from clustersync.core.gate import SynchronizationGate
from clustersync.core.logging import PACKAGE_LOGGER
from clustersync.core.poller import wait_for
from clustersync.errors import SchedulingTimeout, TimeoutExceeded
from clustersync.models.ports import ServiceDescriptor
from clustersync.ports.reservation import resolve_bind_host
from clustersync.ports.store import InMemoryConfigurationStore

from tests.fakes import FakeHeartbeatScheduler


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger(PACKAGE_LOGGER)
    saved_handlers, saved_level = logger.handlers[:], logger.level
    yield logger
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "clustersync.yaml"
    path.write_text(
        "clustersync:\n"
        "  poller:\n"
        "    timeout_s: 0.05\n"
        "    interval_s: 0.01\n"
        "  gate:\n"
        "    scheduling_timeout_s: 0.1\n"
        "  ports:\n"
        "    default_bind_host: localhost\n"
        "  logging:\n"
        "    level: DEBUG\n",
        encoding="utf-8",
    )
    return path


class TestConfigure:
    def test_file_settings_become_active(
        self, config_file: Path, package_logger: logging.Logger
    ) -> None:
        settings = configure(config_file)

        assert get_settings() is settings
        assert package_logger.level == logging.DEBUG

    def test_components_pick_up_file_values(
        self,
        config_file: Path,
        store: InMemoryConfigurationStore,
        package_logger: logging.Logger,
    ) -> None:
        gate = SynchronizationGate(FakeHeartbeatScheduler(["sync"], auto_start=False))
        configure(config_file)

        with pytest.raises(TimeoutExceeded) as poll_info:
            wait_for("file budget", lambda: False)
        assert poll_info.value.timeout_s == 0.05

        with pytest.raises(SchedulingTimeout):
            gate.trigger_cycle("sync")
        assert gate.config.scheduling_timeout_s == 0.1

        descriptor = ServiceDescriptor(service_id="rpc", port_key="rpc.port")
        assert resolve_bind_host(descriptor, store) == "localhost"

    def test_environment_only(
        self, monkeypatch: pytest.MonkeyPatch, package_logger: logging.Logger
    ) -> None:
        monkeypatch.setenv("CLUSTERSYNC_GATE__EFFECT_TIMEOUT_S", "12.5")

        settings = configure()

        assert settings.gate.effect_timeout_s == 12.5
        assert get_settings() is settings

    def test_missing_file_leaves_settings_alone(
        self, tmp_path: Path, package_logger: logging.Logger
    ) -> None:
        before = get_settings()

        with pytest.raises(FileNotFoundError):
            configure(tmp_path / "absent.yaml")

        assert get_settings() is before
