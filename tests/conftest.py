from __future__ import annotations

from collections.abc import Iterator

import pytest
from clustersync.config import GateConfig, use_settings
from clustersync.core.logging import correlation_scope
from clustersync.ports.store import InMemoryConfigurationStore, reset_global_configuration
from clustersync.scheduler.ap_scheduler import HeartbeatTaskScheduler


@pytest.fixture(autouse=True)
def clean_global_configuration() -> Iterator[None]:
    reset_global_configuration()
    use_settings(None)
    yield
    reset_global_configuration()
    use_settings(None)


@pytest.fixture(autouse=True)
def correlated_test_id(request: pytest.FixtureRequest) -> Iterator[str]:
    """Tag every record logged by the test with its node id."""
    with correlation_scope(test_id=request.node.nodeid):
        yield request.node.nodeid


@pytest.fixture
def store() -> InMemoryConfigurationStore:
    return InMemoryConfigurationStore()


@pytest.fixture
def gate_config() -> GateConfig:
    return GateConfig(scheduling_timeout_s=0.3, poll_interval_s=0.01, effect_timeout_s=2.0)


@pytest.fixture
def heartbeat_scheduler() -> Iterator[HeartbeatTaskScheduler]:
    scheduler = HeartbeatTaskScheduler()
    yield scheduler
    scheduler.stop()
