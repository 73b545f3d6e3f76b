"""Observer construction and the default watchdog subscription."""

from __future__ import annotations

import os
from typing import Callable, Iterable, List, Type

from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from .config import LOGGER, USE_POLLING_ENV
from .handler import BatchingHandler, ChangeEvent

Unsubscribe = Callable[[], None]
Subscribe = Callable[[str, Iterable[str], Callable[[List[ChangeEvent]], None]], Unsubscribe]


def get_boolean_env(name: str, default: bool = False) -> bool:
    """Parse a boolean environment variable."""
    val = os.environ.get(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def create_observer(use_polling: bool, observer_cls: Type[Observer] = Observer) -> Observer:
    """Create a watchdog observer based on configuration."""
    if use_polling:
        LOGGER.info("Using polling observer for filesystem events")
        return PollingObserver()
    return observer_cls()


def watchdog_subscribe(
    root: str,
    ignore_patterns: Iterable[str],
    callback: Callable[[List[ChangeEvent]], None],
) -> Unsubscribe:
    """Watch ``root`` recursively; returns a function that stops watching."""
    handler = BatchingHandler(root, callback, ignore_patterns)
    observer = create_observer(get_boolean_env(USE_POLLING_ENV))
    observer.schedule(handler, os.path.abspath(root), recursive=True)
    observer.start()

    def unsubscribe() -> None:
        handler.close()
        observer.stop()
        observer.join(timeout=5.0)

    return unsubscribe


__all__ = ["create_observer", "get_boolean_env", "watchdog_subscribe", "Subscribe", "Unsubscribe"]
