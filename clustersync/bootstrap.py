"""One-call setup for a test session: load settings, activate them, start logging."""

from __future__ import annotations

import logging
from pathlib import Path

from clustersync.config import ClusterSyncSettings, load_config, use_settings
from clustersync.core.logging import setup_logging

logger = logging.getLogger(__name__)


def configure(path: str | Path | None = None) -> ClusterSyncSettings:
    """Make settings from ``path`` (or the environment alone) the active ones.

    Waits, gates and reservations created without an explicit config section
    pick the new values up on their next call.
    """
    settings = load_config(path) if path is not None else ClusterSyncSettings()
    use_settings(settings)
    setup_logging(settings.logging)
    logger.debug("Settings activated from %s", path or "environment")
    return settings


__all__ = ["configure"]
