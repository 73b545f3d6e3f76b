"""Shared settings and logger for the watch loop."""

from __future__ import annotations

import os

from barrelkeep.logger import get_logger, safe_float


LOGGER = get_logger("barrelkeep.watch")

# Sole affected "directory" passed to on_regenerate when the config file changed.
CONFIG_CHANGED = "__CONFIG_CHANGED__"

# Debounce interval for file system events
DELAY_SECS = safe_float(os.environ.get("BARRELKEEP_DEBOUNCE_SECS"), 0.1, LOGGER, "BARRELKEEP_DEBOUNCE_SECS")

# Self-write entries with no matching event are dropped after this long.
WRITE_TTL_SECS = safe_float(os.environ.get("BARRELKEEP_WRITE_TTL_SECS"), 5.0, LOGGER, "BARRELKEEP_WRITE_TTL_SECS")

# Window used to coalesce raw watchdog events into one batch.
BATCH_SECS = safe_float(os.environ.get("BARRELKEEP_BATCH_SECS"), 0.05, LOGGER, "BARRELKEEP_BATCH_SECS")

USE_POLLING_ENV = "BARRELKEEP_USE_POLLING"
