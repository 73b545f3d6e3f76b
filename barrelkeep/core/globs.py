"""Glob matching for rule directories, module patterns and excludes.

Directory globs are matched segment by segment against relative POSIX paths:
``*`` stays inside one segment and ``**`` spans zero or more segments. Entry
names are matched with ``fnmatch`` (case-sensitive). Dot-entries only match a
pattern segment that itself starts with ``.`` unless ``dot=True``.
"""
from __future__ import annotations

import fnmatch
from typing import Iterable, List, Optional, Sequence

# Dependency and VCS stores are never scanned or watched.
IGNORED_DIR_NAMES = frozenset({"node_modules", ".git"})
IGNORE_PATTERNS = ("**/node_modules/**", "**/.git/**")


def normalize_pattern(pattern: str) -> str:
    p = pattern.strip().replace("\\", "/")
    while p.startswith("./"):
        p = p[2:]
    return p.rstrip("/")


def split_path(rel: str) -> List[str]:
    rel = rel.replace("\\", "/")
    return [part for part in rel.split("/") if part and part != "."]


def match_name(name: str, pattern: str, dot: bool = False) -> bool:
    if not dot and name.startswith(".") and not pattern.startswith("."):
        return False
    return fnmatch.fnmatchcase(name, pattern)


def _match_segments(parts: Sequence[str], pats: Sequence[str], dot: bool) -> bool:
    if not pats:
        return not parts
    head = pats[0]
    if head == "**":
        for i in range(len(parts) + 1):
            if i > 0 and not dot and parts[i - 1].startswith("."):
                break
            if _match_segments(parts[i:], pats[1:], dot):
                return True
        return False
    if not parts or not match_name(parts[0], head, dot):
        return False
    return _match_segments(parts[1:], pats[1:], dot)


def match_path(rel: str, pattern: str, dot: bool = False) -> bool:
    """Match a relative path like ``src/lib`` against ``src/**``.

    The root itself (``""`` or ``"."``) only matches the pattern ``"."``.
    """
    pats = split_path(normalize_pattern(pattern))
    parts = split_path(rel)
    if not parts:
        return not pats
    return _match_segments(parts, pats, dot)


def max_depth(pattern: str) -> Optional[int]:
    """Deepest directory a pattern can match, or None when it has ``**``."""
    pats = split_path(normalize_pattern(pattern))
    if "**" in pats:
        return None
    return len(pats)


def match_module(name: str, pattern: str) -> bool:
    """Match a directory entry name against a rule's include pattern."""
    return match_name(name, normalize_pattern(pattern))


def is_ignored(rel: str, patterns: Iterable[str] = IGNORE_PATTERNS) -> bool:
    parts = split_path(rel)
    if any(part in IGNORED_DIR_NAMES for part in parts):
        return True
    return any(match_path(rel, p, dot=True) for p in patterns)


class Excluder:
    """Global exclude patterns applied to entry names."""

    def __init__(self, patterns: Iterable[str]):
        self.patterns: List[str] = [normalize_pattern(p) for p in patterns if p.strip()]

    def excludes(self, name: str) -> bool:
        return any(fnmatch.fnmatchcase(name, g) for g in self.patterns)
