"""Per-session record of paths the executor is about to write."""

from __future__ import annotations

import os
import threading
import time
from typing import Callable, Dict, Optional

from .config import WRITE_TTL_SECS


class SelfWriteTracker:
    """Thread-safe set of absolute paths with a time-to-live.

    ``track`` is the executor's pre-write hook; ``consume`` is called by the
    watcher for each incoming event and removes the path on its first match.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._ttl = WRITE_TTL_SECS if ttl is None else ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._paths: Dict[str, float] = {}

    def track(self, path: str) -> None:
        key = os.path.abspath(path)
        with self._lock:
            self._gc_locked()
            self._paths[key] = self._clock()

    def consume(self, path: str) -> bool:
        key = os.path.abspath(path)
        with self._lock:
            self._gc_locked()
            return self._paths.pop(key, None) is not None

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        with self._lock:
            self._gc_locked()
            return os.path.abspath(path) in self._paths

    def __len__(self) -> int:
        with self._lock:
            self._gc_locked()
            return len(self._paths)

    def clear(self) -> None:
        with self._lock:
            self._paths.clear()

    def _gc_locked(self) -> None:
        cutoff = self._clock() - self._ttl
        expired = [p for p, ts in self._paths.items() if ts < cutoff]
        for p in expired:
            del self._paths[p]


__all__ = ["SelfWriteTracker"]
