"""Plan and execute barrel writes across all configured rules.

``plan`` only reads the filesystem. Every action is collected before
``execute`` writes anything, so a ``PlanResult`` is a stable snapshot.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Union

from barrelkeep.config.schema import ResolvedConfig, ResolvedRule
from barrelkeep.core.action import Action, Conflict, Create, Skip, is_writable
from barrelkeep.core.cache import ScanCache, load_cache, new_cache, save_cache
from barrelkeep.core.extensions import resolve_extension_mode
from barrelkeep.core.globs import Excluder
from barrelkeep.core.listing import DirectoryLister, OsDirectoryLister
from barrelkeep.core.naming import check_collisions
from barrelkeep.core.renderer import render_barrel
from barrelkeep.core.scanner import expand_rule_dirs, scan_directory
from barrelkeep.core.writer import BeforeWriteHook, execute_write, plan_write
from barrelkeep.errors import BarrelkeepError, ScanError
from barrelkeep.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlanError:
    directory: str
    error: BaseException


@dataclass
class PlanResult:
    actions: List[Action] = field(default_factory=list)
    errors: List[PlanError] = field(default_factory=list)

    @property
    def writable(self) -> List[Action]:
        return [a for a in self.actions if is_writable(a)]

    @property
    def conflicts(self) -> List[Conflict]:
        return [a for a in self.actions if isinstance(a, Conflict)]

    @property
    def is_clean(self) -> bool:
        """True when nothing would be written and nothing failed."""
        return not self.errors and all(isinstance(a, Skip) for a in self.actions)


def plan(
    config: ResolvedConfig,
    cwd: str,
    *,
    lister: Optional[DirectoryLister] = None,
    cache: Optional[ScanCache] = None,
    extension_mode: Optional[str] = None,
) -> PlanResult:
    cwd = os.path.abspath(cwd)
    lister = lister or OsDirectoryLister()
    mode = extension_mode or resolve_extension_mode(config.extensions, cwd)

    result = PlanResult()

    # Barrel path -> owning rule, in rule order; an earlier rule wins a shared target.
    targets: Dict[str, ResolvedRule] = {}
    for rule in config.rules:
        try:
            dirs = expand_rule_dirs(rule, cwd, lister)
        except ScanError as e:
            result.errors.append(PlanError(e.directory, e))
            continue
        for directory in dirs:
            targets.setdefault(os.path.join(directory, config.barrel_file), rule)

    # Deepest first, so a parent sees the barrels its sub-directories are about to get.
    excluder = Excluder(config.exclude)
    creating: Set[str] = set()
    outcomes: Dict[str, Union[Action, PlanError]] = {}
    for barrel_path in sorted(targets, key=lambda p: (-p.count(os.sep), p)):
        directory = os.path.dirname(barrel_path)
        outcome = _plan_directory(
            directory, barrel_path, targets[barrel_path], config, lister, excluder, creating, cache, mode
        )
        if isinstance(outcome, Create):
            creating.add(barrel_path)
        outcomes[barrel_path] = outcome

    for barrel_path in targets:
        outcome = outcomes[barrel_path]
        if isinstance(outcome, PlanError):
            result.errors.append(outcome)
        else:
            result.actions.append(outcome)
    return result


def _plan_directory(
    directory: str,
    barrel_path: str,
    rule: ResolvedRule,
    config: ResolvedConfig,
    lister: DirectoryLister,
    excluder: Excluder,
    creating: Set[str],
    cache: Optional[ScanCache],
    mode: str,
) -> Union[Action, PlanError]:
    try:
        scanned = scan_directory(directory, rule, config, lister, excluder, pending_barrels=creating)
    except OSError as e:
        logger.warning("Failed to scan directory", extra={"dir": directory, "error": str(e)})
        return PlanError(directory, ScanError(directory, e))
    try:
        content = None
        files = scanned.files
        if cache is not None:
            hit = cache.lookup(directory, files)
            if hit is not None:
                content = hit.barrel_content
        if content is None:
            check_collisions(scanned.modules)
            content = render_barrel(scanned.modules, mode)
            if cache is not None:
                cache.store(directory, files, content)
        return plan_write(barrel_path, content)
    except (BarrelkeepError, OSError) as e:
        logger.debug("Planning failed for directory", extra={"dir": directory, "error": str(e)})
        return PlanError(directory, e)


def plan_with_cache(
    config: ResolvedConfig,
    cwd: str,
    *,
    lister: Optional[DirectoryLister] = None,
    use_cache: bool = True,
) -> PlanResult:
    """``plan`` backed by the on-disk scan cache, which is refreshed afterwards."""
    if not use_cache:
        return plan(config, cwd, lister=lister)
    cwd = os.path.abspath(cwd)
    mode = resolve_extension_mode(config.extensions, cwd)
    cache = load_cache(cwd, config, mode) or new_cache(cwd, config, mode)
    result = plan(config, cwd, lister=lister, cache=cache, extension_mode=mode)
    cache.prune()
    save_cache(cwd, cache)
    return result


def execute(result: PlanResult, *, on_before_write: Optional[BeforeWriteHook] = None) -> List[str]:
    """Write every Create/Update action in plan order; return the written paths."""
    written: List[str] = []
    for action in result.writable:
        execute_write(action, on_before_write)
        written.append(action.path)
    return written
