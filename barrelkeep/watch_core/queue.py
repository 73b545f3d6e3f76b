"""Debounced queue of affected directories used by the watcher."""

from __future__ import annotations

import threading
from typing import Callable, Iterable, List, Optional, Set

from .config import DELAY_SECS, LOGGER

TimerFactory = Callable[..., threading.Timer]


class Debouncer:
    """Collects affected directories and flushes them after a quiet interval.

    At most one timer is pending; every ``add`` re-arms it. When a flush fires
    while the previous callback is still running, that flush is dropped and
    the directories it carried are discarded.
    """

    def __init__(
        self,
        process_cb: Callable[[List[str]], None],
        delay: Optional[float] = None,
        *,
        on_drop: Optional[Callable[[List[str]], None]] = None,
        timer_factory: TimerFactory = threading.Timer,
    ):
        self._lock = threading.Lock()
        self._dirs: Set[str] = set()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._in_flight = False
        self._closed = False
        self._delay = DELAY_SECS if delay is None else delay
        self._process_cb = process_cb
        self._on_drop = on_drop
        self._timer_factory = timer_factory

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    @property
    def pending(self) -> List[str]:
        with self._lock:
            return sorted(self._dirs)

    def add(self, dirs: Iterable[str]) -> None:
        with self._lock:
            if self._closed:
                return
            self._dirs.update(dirs)
            if not self._dirs:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._timer = self._timer_factory(self._delay, self._flush, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def _flush(self, generation: int) -> None:
        with self._lock:
            # A later add re-armed the timer; this fire is stale.
            if generation != self._generation or self._closed:
                return
            self._timer = None
            dirs = sorted(self._dirs)
            self._dirs.clear()
            dropped = self._in_flight
            if not dropped:
                self._in_flight = True

        if dropped:
            LOGGER.debug("Regeneration in flight, dropping debounced batch", extra={"dirs": dirs})
            if self._on_drop is not None:
                self._on_drop(dirs)
            return

        try:
            self._process_cb(dirs)
        except Exception as exc:
            LOGGER.error(
                "Regeneration failed in Debouncer._flush",
                extra={"error": str(exc), "batch_size": len(dirs)},
                exc_info=True,
            )
        finally:
            with self._lock:
                self._in_flight = False

    def cancel(self) -> None:
        """Stop any pending timer and refuse further work."""
        with self._lock:
            self._closed = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._dirs.clear()


__all__ = ["Debouncer"]
