"""Ownership check, diff and write of a single barrel file."""
from __future__ import annotations

from typing import Callable, Optional

from barrelkeep.core.action import Action, Conflict, Create, Skip, Update, is_writable
from barrelkeep.core.header import is_owned

HAND_WRITTEN = "hand-written"
UP_TO_DATE = "up-to-date"

BeforeWriteHook = Callable[[str], None]


def read_existing(path: str) -> Optional[str]:
    """Current file content, or None when there is no file at ``path``."""
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError:
        return None


def plan_write(path: str, content: str) -> Action:
    """Classify what writing ``content`` to ``path`` would do.

    Evaluated in order: missing file, foreign file, identical, changed.
    Comparison is exact; nothing is normalized.
    """
    try:
        existing = read_existing(path)
    except UnicodeDecodeError:
        return Conflict(path, HAND_WRITTEN)
    if existing is None:
        return Create(path, content)
    if not is_owned(existing):
        return Conflict(path, HAND_WRITTEN)
    if existing == content:
        return Skip(path, UP_TO_DATE)
    return Update(path, content)


def execute_write(action: Action, on_before_write: Optional[BeforeWriteHook] = None) -> bool:
    """Write a Create/Update action; returns False for Skip/Conflict.

    ``on_before_write`` runs strictly before the file is opened.
    """
    if not is_writable(action):
        return False
    if on_before_write is not None:
        on_before_write(action.path)
    with open(action.path, "w", encoding="utf-8", newline="") as f:
        f.write(action.content)
    return True
