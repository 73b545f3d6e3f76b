"""Watchdog event handler that coalesces raw events into batches."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler

from barrelkeep.core import globs
from .config import BATCH_SECS, LOGGER
from .routing import relative_to_root

CREATED = "created"
MODIFIED = "modified"
DELETED = "deleted"
MOVED = "moved"


@dataclass(frozen=True)
class ChangeEvent:
    path: str
    kind: str


EventCallback = Callable[[List[ChangeEvent]], None]


class BatchingHandler(FileSystemEventHandler):
    """Forwards file events to ``callback`` in short, per-path de-duplicated batches.

    A single write usually produces several watchdog events (created, modified,
    modified); batching collapses them so the self-write tracker sees one event
    per written path.
    """

    def __init__(
        self,
        root: str,
        callback: EventCallback,
        ignore_patterns: Iterable[str] = globs.IGNORE_PATTERNS,
        *,
        batch_secs: Optional[float] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        super().__init__()
        self.root = os.path.abspath(root)
        self.callback = callback
        self.ignore_patterns = tuple(ignore_patterns)
        self._batch_secs = BATCH_SECS if batch_secs is None else batch_secs
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._pending: Dict[str, ChangeEvent] = {}
        self._timer: Optional[threading.Timer] = None
        self._closed = False

    def _enqueue(self, raw_path, kind: str) -> None:
        path = os.path.abspath(os.fsdecode(raw_path))
        rel = relative_to_root(path, self.root)
        if rel is None or globs.is_ignored(rel, self.ignore_patterns):
            return
        with self._lock:
            if self._closed:
                return
            self._pending[path] = ChangeEvent(path, kind)
            if self._timer is None:
                self._timer = self._timer_factory(self._batch_secs, self.flush)
                self._timer.daemon = True
                self._timer.start()

    def flush(self) -> None:
        with self._lock:
            events = list(self._pending.values())
            self._pending.clear()
            self._timer = None
        if not events:
            return
        try:
            self.callback(events)
        except Exception as exc:
            LOGGER.error(
                "Event callback failed in BatchingHandler.flush",
                extra={"error": str(exc), "batch_size": len(events)},
                exc_info=True,
            )

    def close(self) -> None:
        with self._lock:
            self._closed = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending.clear()

    def on_created(self, event: FileSystemEvent) -> None:
        self._enqueue(event.src_path, CREATED)

    def on_modified(self, event: FileSystemEvent) -> None:
        # Directory mtime changes duplicate the child events.
        if not event.is_directory:
            self._enqueue(event.src_path, MODIFIED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._enqueue(event.src_path, DELETED)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._enqueue(event.src_path, MOVED)
        dest = getattr(event, "dest_path", None)
        if dest:
            self._enqueue(dest, MOVED)


__all__ = ["BatchingHandler", "ChangeEvent", "CREATED", "MODIFIED", "DELETED", "MOVED"]
