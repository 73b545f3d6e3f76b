"""barrelkeep: keep generated barrel (index) files in sync with their directories."""

from barrelkeep.config import load_config, load_resolved_config, resolve_defaults
from barrelkeep.core.extensions import detect_extension_mode
from barrelkeep.core.planner import PlanResult, execute, plan, plan_with_cache
from barrelkeep.errors import (
    BarrelkeepError,
    ConfigInvalid,
    ConfigNotFound,
    InvalidIdentifier,
    NamespaceCollision,
    ScanError,
)
from barrelkeep.watch_core import CONFIG_CHANGED, SelfWriteTracker, WatchSession, start_watching

__all__ = [
    "BarrelkeepError",
    "CONFIG_CHANGED",
    "ConfigInvalid",
    "ConfigNotFound",
    "InvalidIdentifier",
    "NamespaceCollision",
    "PlanResult",
    "ScanError",
    "SelfWriteTracker",
    "WatchSession",
    "detect_extension_mode",
    "execute",
    "load_config",
    "load_resolved_config",
    "plan",
    "plan_with_cache",
    "resolve_defaults",
    "start_watching",
]
