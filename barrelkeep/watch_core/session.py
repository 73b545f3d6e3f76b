"""A watch session: initial generation, regeneration on change, config reload."""

from __future__ import annotations

import os
import threading
from typing import Callable, List, Optional, Sequence

from barrelkeep.config.loader import load_resolved_config
from barrelkeep.config.schema import ResolvedConfig
from barrelkeep.core.planner import PlanResult, execute, plan_with_cache
from .config import CONFIG_CHANGED, LOGGER
from .queue import TimerFactory
from .tracker import SelfWriteTracker
from .utils import Subscribe
from .watcher import Watcher, start_watching

ConfigLoader = Callable[[str, Optional[str]], ResolvedConfig]


class WatchSession:
    """Owns the tracker, the current config and the watcher for one root.

    Regeneration always plans the full current config; the affected
    directories reported by the watcher are only logged. A config change
    reloads and swaps the config without planning in the same pass.
    """

    def __init__(
        self,
        cwd: str,
        config: ResolvedConfig,
        *,
        config_path: Optional[str] = None,
        use_cache: bool = True,
        on_written: Optional[Callable[[List[str]], None]] = None,
        tracker: Optional[SelfWriteTracker] = None,
        subscribe: Optional[Subscribe] = None,
        delay: Optional[float] = None,
        timer_factory: TimerFactory = threading.Timer,
        loader: ConfigLoader = load_resolved_config,
    ):
        self.cwd = os.path.abspath(cwd)
        self.config_path = config_path
        self.use_cache = use_cache
        self.tracker = tracker if tracker is not None else SelfWriteTracker()
        self.watcher: Optional[Watcher] = None
        self._config = config
        self._on_written = on_written
        self._subscribe = subscribe
        self._delay = delay
        self._timer_factory = timer_factory
        self._loader = loader

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    def _report(self, result: PlanResult) -> None:
        for err in result.errors:
            LOGGER.warning("Failed to plan directory", extra={"dir": err.directory, "error": str(err.error)})
        for conflict in result.conflicts:
            LOGGER.warning("Skipping hand-written file", extra={"path": conflict.path})

    def _generate(self) -> List[str]:
        config = self._config
        result = plan_with_cache(config, self.cwd, use_cache=self.use_cache)
        self._report(result)
        written = execute(result, on_before_write=self.tracker.track)
        if written:
            LOGGER.info("Regenerated barrels", extra={"count": len(written), "paths": written})
            if self._on_written is not None:
                self._on_written(written)
        return written

    def run_initial(self) -> List[str]:
        return self._generate()

    def regenerate(self, affected_dirs: Sequence[str] = ()) -> List[str]:
        LOGGER.debug("Change detected", extra={"dirs": list(affected_dirs)})
        return self._generate()

    def reload_config(self) -> ResolvedConfig:
        # Build the new config completely before anything sees it.
        fresh = self._loader(self.cwd, self.config_path)
        self._config = fresh
        if self.watcher is not None:
            self.watcher.update_config(fresh)
        LOGGER.info("Config reloaded", extra={"rules": len(fresh.rules)})
        return fresh

    def on_regenerate(self, affected_dirs: List[str]) -> None:
        if list(affected_dirs) == [CONFIG_CHANGED]:
            try:
                self.reload_config()
            except Exception as exc:
                LOGGER.error("Config reload failed, keeping previous config", extra={"error": str(exc)}, exc_info=True)
            return
        try:
            self.regenerate(affected_dirs)
        except Exception as exc:
            LOGGER.error("Regeneration failed", extra={"error": str(exc)}, exc_info=True)

    def start(self) -> Watcher:
        self.watcher = start_watching(
            self.cwd,
            self._config,
            self.on_regenerate,
            tracker=self.tracker,
            subscribe=self._subscribe,
            delay=self._delay,
            timer_factory=self._timer_factory,
            config_path=self.config_path,
        )
        return self.watcher

    def stop(self) -> None:
        if self.watcher is not None:
            watcher, self.watcher = self.watcher, None
            watcher.unsubscribe()


__all__ = ["WatchSession"]
