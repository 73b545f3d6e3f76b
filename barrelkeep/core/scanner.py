"""Rule scanning: directory glob expansion and module selection."""
from __future__ import annotations

import os
from collections import deque
from dataclasses import dataclass
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence, Union

from barrelkeep.config.schema import ModuleGlob, ResolvedConfig, ResolvedRule
from barrelkeep.core import globs
from barrelkeep.core.entities import ModuleEntry, ScanResult
from barrelkeep.core.listing import DirEntry, DirectoryLister, OsDirectoryLister
from barrelkeep.errors import ScanError
from barrelkeep.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScanFailure:
    directory: str
    error: BaseException


ScanOutcome = Union[ScanResult, ScanFailure]


def expand_dir_glob(root: str, pattern: str, lister: DirectoryLister) -> List[str]:
    """Return the absolute directories under ``root`` matching ``pattern``.

    Walks breadth-first, never descending into ``node_modules`` or ``.git``.
    Unreadable sub-directories are skipped; an unreadable root raises.
    """
    root = os.path.abspath(root)
    depth_limit = globs.max_depth(pattern)
    matched: List[str] = []
    if globs.match_path("", pattern):
        matched.append(root)

    queue = deque([(root, "", 0)])
    while queue:
        abs_dir, rel_dir, depth = queue.popleft()
        if depth_limit is not None and depth >= depth_limit:
            continue
        try:
            entries = lister.list_entries(abs_dir)
        except OSError as exc:
            if abs_dir == root:
                raise
            logger.debug("Skipping unreadable directory", extra={"dir": abs_dir, "error": str(exc)})
            continue
        for entry in sorted(entries, key=lambda e: e.name):
            if not entry.is_dir or entry.name in globs.IGNORED_DIR_NAMES:
                continue
            child_rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            child_abs = os.path.join(abs_dir, entry.name)
            if globs.match_path(child_rel, pattern):
                matched.append(child_abs)
            queue.append((child_abs, child_rel, depth + 1))
    return sorted(matched)


def candidate_entries(
    directory: str,
    barrel_file: str,
    lister: DirectoryLister,
    pending_barrels: AbstractSet[str] = frozenset(),
) -> List[DirEntry]:
    """Files in ``directory`` plus sub-directories that have a barrel.

    A sub-directory counts when its barrel exists on disk or is in
    ``pending_barrels`` (about to be created by the same plan). Sub-directories
    without one are never implicitly re-exported.
    """
    files: List[DirEntry] = []
    subdirs: List[DirEntry] = []
    for entry in lister.list_entries(directory):
        if entry.is_dir:
            if entry.name in globs.IGNORED_DIR_NAMES:
                continue
            sub_barrel = os.path.join(directory, entry.name, barrel_file)
            if sub_barrel in pending_barrels or lister.is_file(sub_barrel):
                subdirs.append(entry)
        elif entry.name != barrel_file:
            files.append(entry)
    return files + subdirs


def select_modules(
    entries: Sequence[DirEntry],
    module_globs: Iterable[ModuleGlob],
    excluder: globs.Excluder,
) -> tuple[ModuleEntry, ...]:
    """Apply include patterns in declaration order; the first match wins."""
    selected: Dict[str, ModuleEntry] = {}
    for module_glob in module_globs:
        for entry in entries:
            if entry.name in selected:
                continue
            if not globs.match_module(entry.name, module_glob.include):
                continue
            if excluder.excludes(entry.name):
                continue
            selected[entry.name] = ModuleEntry.make(entry.name, module_glob.style, entry.is_dir)
    # Filename breaks specifier ties (foo.ts vs foo.mts).
    return tuple(sorted(selected.values(), key=lambda m: (m.specifier, m.filename)))


def scan_directory(
    directory: str,
    rule: ResolvedRule,
    config: ResolvedConfig,
    lister: DirectoryLister,
    excluder: Optional[globs.Excluder] = None,
    pending_barrels: AbstractSet[str] = frozenset(),
) -> ScanResult:
    excluder = excluder or globs.Excluder(config.exclude)
    entries = candidate_entries(directory, config.barrel_file, lister, pending_barrels)
    return ScanResult(directory=directory, modules=select_modules(entries, rule.modules, excluder))


def expand_rule_dirs(rule: ResolvedRule, cwd: str, lister: DirectoryLister) -> List[str]:
    try:
        return expand_dir_glob(cwd, rule.dirs, lister)
    except OSError as exc:
        raise ScanError(f"rule({rule.dirs})", exc) from exc


def scan_rule(
    rule: ResolvedRule,
    config: ResolvedConfig,
    cwd: str,
    lister: Optional[DirectoryLister] = None,
) -> List[ScanOutcome]:
    """Scan every directory matched by ``rule``.

    Raises:
        ScanError: the directory glob could not be expanded at all.
    """
    lister = lister or OsDirectoryLister()
    dirs = expand_rule_dirs(rule, cwd, lister)
    excluder = globs.Excluder(config.exclude)
    outcomes: List[ScanOutcome] = []
    for directory in dirs:
        try:
            outcomes.append(scan_directory(directory, rule, config, lister, excluder))
        except OSError as exc:
            logger.warning("Failed to scan directory", extra={"dir": directory, "error": str(exc)})
            outcomes.append(ScanFailure(directory, ScanError(directory, exc)))
    return outcomes
