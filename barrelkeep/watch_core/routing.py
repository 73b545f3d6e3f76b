"""Map raw filesystem events to config changes or affected rule directories."""

from __future__ import annotations

import os
import posixpath
from typing import Iterable, Optional, Sequence

from barrelkeep.config.schema import ResolvedConfig
from barrelkeep.core import globs


def relative_to_root(path: str, root: str) -> Optional[str]:
    """POSIX path of ``path`` relative to ``root``; None when outside it."""
    try:
        rel = os.path.relpath(os.path.abspath(path), os.path.abspath(root))
    except ValueError:
        return None
    if rel == os.pardir or rel.startswith(os.pardir + os.sep):
        return None
    rel = rel.replace(os.sep, "/")
    return "" if rel == "." else rel


def is_config_event(rel_path: str, config_names: Iterable[str]) -> bool:
    return rel_path in set(config_names)


def resolve_affected_dir(rel_path: str, config: ResolvedConfig) -> Optional[str]:
    """Deepest ancestor of the event's directory matching any rule glob.

    Returns the match relative to the root ("" for the root itself) or None.
    """
    patterns: Sequence[str] = [rule.dirs for rule in config.rules]
    if not patterns:
        return None
    current = posixpath.dirname(rel_path)
    while True:
        if any(globs.match_path(current, p) for p in patterns):
            return current
        if not current:
            return None
        current = posixpath.dirname(current)


__all__ = ["relative_to_root", "is_config_event", "resolve_affected_dir"]
