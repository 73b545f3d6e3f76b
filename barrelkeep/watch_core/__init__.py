"""Core building blocks for the watch loop.

Modules:
    config: shared settings and logger
    tracker: per-session self-write tracker
    queue: debounced affected-directory queue
    routing: event to config-change / rule directory mapping
    handler: watchdog event handler with batching
    utils: observer construction and default subscription
    watcher: start_watching and the Watcher handle
    session: WatchSession driving plan/execute
"""

from . import config, tracker, queue, routing, handler, utils, watcher, session
from .config import CONFIG_CHANGED
from .handler import ChangeEvent
from .session import WatchSession
from .tracker import SelfWriteTracker
from .watcher import Watcher, start_watching

__all__ = [
    "config",
    "tracker",
    "queue",
    "routing",
    "handler",
    "utils",
    "watcher",
    "session",
    "CONFIG_CHANGED",
    "ChangeEvent",
    "SelfWriteTracker",
    "WatchSession",
    "Watcher",
    "start_watching",
]
