"""Event routing and debounced regeneration for one watched root."""

from __future__ import annotations

import os
import threading
from typing import Callable, Iterable, List, Optional, Sequence

from barrelkeep.config.loader import CONFIG_NAMES, config_file_names
from barrelkeep.config.schema import ResolvedConfig
from barrelkeep.core import globs
from .config import CONFIG_CHANGED, LOGGER
from .handler import ChangeEvent
from .queue import Debouncer, TimerFactory
from .routing import is_config_event, relative_to_root, resolve_affected_dir
from .tracker import SelfWriteTracker
from .utils import Subscribe, Unsubscribe, watchdog_subscribe

RegenerateCallback = Callable[[List[str]], None]


class Watcher:
    """Routes change events for ``cwd`` and drives ``on_regenerate``.

    Events for paths the tracker is waiting on are consumed silently. A config
    file event calls ``on_regenerate([CONFIG_CHANGED])`` right away; any other
    event marks the deepest rule directory above it as affected and re-arms
    the debounce timer.
    """

    def __init__(
        self,
        cwd: str,
        config: ResolvedConfig,
        on_regenerate: RegenerateCallback,
        *,
        tracker: Optional[SelfWriteTracker] = None,
        delay: Optional[float] = None,
        timer_factory: TimerFactory = threading.Timer,
        config_names: Sequence[str] = CONFIG_NAMES,
    ):
        self.cwd = os.path.abspath(cwd)
        self.tracker = tracker if tracker is not None else SelfWriteTracker()
        self.config_names = tuple(config_names)
        self._config = config
        self._on_regenerate = on_regenerate
        self._unsubscribe: Optional[Unsubscribe] = None
        self.debouncer = Debouncer(
            self._regenerate,
            delay,
            on_drop=self._on_drop,
            timer_factory=timer_factory,
        )

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    def update_config(self, config: ResolvedConfig) -> None:
        """Swap the config used for routing subsequent events."""
        self._config = config

    def handle_events(self, events: Iterable[ChangeEvent]) -> None:
        config = self._config
        affected: List[str] = []
        for event in events:
            path = os.path.abspath(event.path)
            if self.tracker.consume(path):
                continue
            rel = relative_to_root(path, self.cwd)
            if rel is None or globs.is_ignored(rel):
                continue
            if is_config_event(rel, self.config_names):
                LOGGER.info("Config file changed", extra={"path": path})
                self._call(lambda: self._on_regenerate([CONFIG_CHANGED]))
                return
            rel_dir = resolve_affected_dir(rel, config)
            if rel_dir is not None:
                affected.append(os.path.join(self.cwd, rel_dir) if rel_dir else self.cwd)
        if affected:
            self.debouncer.add(affected)

    def _regenerate(self, dirs: List[str]) -> None:
        self._on_regenerate(dirs)

    def _on_drop(self, dirs: List[str]) -> None:
        LOGGER.debug("Dropped affected directories while busy", extra={"dirs": dirs})

    def _call(self, fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception as exc:
            LOGGER.error("Config reload failed", extra={"error": str(exc)}, exc_info=True)

    def attach(self, unsubscribe: Unsubscribe) -> None:
        self._unsubscribe = unsubscribe

    def unsubscribe(self) -> None:
        self.debouncer.cancel()
        if self._unsubscribe is not None:
            unsub, self._unsubscribe = self._unsubscribe, None
            unsub()


def start_watching(
    cwd: str,
    config: ResolvedConfig,
    on_regenerate: RegenerateCallback,
    *,
    tracker: Optional[SelfWriteTracker] = None,
    subscribe: Optional[Subscribe] = None,
    delay: Optional[float] = None,
    timer_factory: TimerFactory = threading.Timer,
    config_names: Sequence[str] = CONFIG_NAMES,
    config_path: Optional[str] = None,
) -> Watcher:
    """Subscribe to changes under ``cwd``; call ``unsubscribe()`` on the result to stop.

    An explicit ``config_path`` replaces ``config_names`` as the watched config file.
    """
    if config_path:
        config_names = config_file_names(cwd, config_path)
    watcher = Watcher(
        cwd,
        config,
        on_regenerate,
        tracker=tracker,
        delay=delay,
        timer_factory=timer_factory,
        config_names=config_names,
    )
    subscribe = subscribe or watchdog_subscribe
    watcher.attach(subscribe(watcher.cwd, globs.IGNORE_PATTERNS, watcher.handle_events))
    LOGGER.debug("Watching for changes", extra={"root": watcher.cwd})
    return watcher


__all__ = ["Watcher", "start_watching", "RegenerateCallback"]
