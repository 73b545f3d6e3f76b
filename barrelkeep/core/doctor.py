"""Project health checks reported by ``barrelkeep doctor``."""
from __future__ import annotations

import os
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, TypeVar, Union

from barrelkeep.config.loader import load_config
from barrelkeep.config.schema import ResolvedConfig, ResolvedRule
from barrelkeep.core.action import Create, Update
from barrelkeep.core.cache import cache_size
from barrelkeep.core.entities import NAMESPACE, ScanResult
from barrelkeep.core.extensions import detect_extension_mode
from barrelkeep.core.formatter import detect_formatter
from barrelkeep.core.header import is_owned
from barrelkeep.core.listing import DirectoryLister, OsDirectoryLister
from barrelkeep.core.naming import check_collisions
from barrelkeep.core.planner import plan
from barrelkeep.core.scanner import expand_dir_glob, scan_rule
from barrelkeep.core.writer import read_existing
from barrelkeep.errors import BarrelkeepError, ConfigInvalid, ConfigNotFound, NamespaceCollision

T = TypeVar("T")

SETUP = "setup"
ENVIRONMENT = "environment"
LINT = "lint"
SUGGESTION = "suggestion"

CATEGORY_ORDER = (SETUP, ENVIRONMENT, LINT, SUGGESTION)
CATEGORY_LABELS = {
    SETUP: "Setup",
    ENVIRONMENT: "Environment",
    LINT: "Lint",
    SUGGESTION: "Suggestions",
}

SYMBOLS = {"pass": "✓", "fail": "✗", "suggest": "⚡", "arrow": "→"}


@dataclass(frozen=True)
class Pass:
    category: str
    message: str


@dataclass(frozen=True)
class Fail:
    category: str
    message: str
    fix: Optional[str] = None


@dataclass(frozen=True)
class Suggestion:
    category: str
    message: str


DoctorCheck = Union[Pass, Fail, Suggestion]


def match_check(
    check: DoctorCheck,
    *,
    passed: Callable[[Pass], T],
    failed: Callable[[Fail], T],
    suggestion: Callable[[Suggestion], T],
) -> T:
    if isinstance(check, Pass):
        return passed(check)
    if isinstance(check, Fail):
        return failed(check)
    if isinstance(check, Suggestion):
        return suggestion(check)
    raise TypeError(f"Unknown check: {check!r}")


def _matched_dirs(rule: ResolvedRule, cwd: str, lister: DirectoryLister) -> List[str]:
    try:
        return expand_dir_glob(cwd, rule.dirs, lister)
    except OSError:
        return []


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

def check_config(cwd: str, config_path: Optional[str] = None) -> List[DoctorCheck]:
    try:
        model = load_config(cwd, config_path)
    except ConfigNotFound:
        return [Fail(SETUP, "No config file found", "Run `barrelkeep init` to create one")]
    except ConfigInvalid as e:
        return [
            Pass(SETUP, "Config file found"),
            Fail(SETUP, f"Config parse error: {e.message}"),
        ]
    rule_count = len(model.rules or [])
    return [Pass(SETUP, "Config file found"), Pass(SETUP, f"Config valid ({rule_count} rules)")]


def check_rules_exist(config: ResolvedConfig) -> DoctorCheck:
    if not config.rules:
        return Fail(SETUP, "0 rules configured, nothing will be generated", "Add at least one rule to your config")
    return Pass(SETUP, f"{len(config.rules)} rules configured")


def check_rule_dirs_match(rule: ResolvedRule, cwd: str, lister: DirectoryLister) -> DoctorCheck:
    dirs = _matched_dirs(rule, cwd, lister)
    if not dirs:
        return Fail(
            SETUP,
            f'Rule "{rule.dirs}" matches 0 directories',
            "Check the path pattern: does it match existing directories?",
        )
    return Pass(SETUP, f'Rule "{rule.dirs}" matches {len(dirs)} directories')


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

def check_extension_mode(cwd: str) -> DoctorCheck:
    mode = detect_extension_mode(cwd)
    label = "none (no extensions)" if mode == "none" else mode
    return Pass(ENVIRONMENT, f"Extension mode: {label}")


def check_formatter(config: ResolvedConfig, cwd: str) -> DoctorCheck:
    if config.formatter is False:
        return Pass(ENVIRONMENT, "Formatter: disabled (config)")
    if config.formatter != "auto":
        return Pass(ENVIRONMENT, f"Formatter: {config.formatter} (config)")
    kind = detect_formatter(cwd)
    if kind is None:
        return Fail(
            ENVIRONMENT,
            "No formatter detected, generated files won't be auto-formatted",
            "Add `formatter: false` to config to suppress this warning",
        )
    return Pass(ENVIRONMENT, f"Formatter: {kind}")


def check_cache(cwd: str) -> DoctorCheck:
    size = cache_size(cwd)
    if size is None:
        return Pass(ENVIRONMENT, "Cache: not created yet")
    return Pass(ENVIRONMENT, f"Cache: {round(size / 1024)}KB")


# ---------------------------------------------------------------------------
# Lint
# ---------------------------------------------------------------------------

def check_staleness(config: ResolvedConfig, cwd: str, lister: DirectoryLister) -> DoctorCheck:
    result = plan(config, cwd, lister=lister)
    creates = sum(1 for a in result.actions if isinstance(a, Create))
    updates = sum(1 for a in result.actions if isinstance(a, Update))
    stale = creates + updates
    if stale == 0:
        return Pass(LINT, f"{len(result.actions)} managed index files, all up-to-date")
    parts = []
    if creates:
        parts.append(f"{creates} to create")
    if updates:
        parts.append(f"{updates} to update")
    return Fail(LINT, f"{stale} index files are stale ({', '.join(parts)})", "Run `barrelkeep generate` to fix")


def check_namespace_collisions(config: ResolvedConfig, cwd: str, lister: DirectoryLister) -> List[DoctorCheck]:
    checks: List[DoctorCheck] = []
    for rule in config.rules:
        if not any(m.style == NAMESPACE for m in rule.modules):
            continue
        try:
            outcomes = scan_rule(rule, config, cwd, lister)
        except BarrelkeepError:
            continue
        for outcome in outcomes:
            if not isinstance(outcome, ScanResult):
                continue
            try:
                check_collisions(outcome.modules)
            except NamespaceCollision as e:
                checks.append(Fail(LINT, str(e), "Rename one of the files"))
            except BarrelkeepError as e:
                checks.append(Fail(LINT, str(e), "Rename the file or use star style"))
    if not checks:
        checks.append(Pass(LINT, "No namespace collisions"))
    return checks


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

def looks_like_barrel(content: str) -> bool:
    """Every non-empty, non-comment line is an export statement."""
    lines = [line.strip() for line in content.split("\n")]
    lines = [line for line in lines if line and not line.startswith("//")]
    if not lines:
        return False
    return all(line.startswith("export ") for line in lines)


def check_unmanaged_directories(config: ResolvedConfig, cwd: str, lister: DirectoryLister) -> List[DoctorCheck]:
    managed = set()
    for rule in config.rules:
        managed.update(_matched_dirs(rule, cwd, lister))
    src = os.path.join(cwd, "src")
    candidates = [src] if os.path.isdir(src) else []
    try:
        candidates += expand_dir_glob(cwd, "src/**", lister)
    except OSError:
        pass

    suggestions: List[DoctorCheck] = []
    for directory in sorted(set(candidates)):
        if directory in managed:
            continue
        try:
            entries = lister.list_entries(directory)
        except OSError:
            continue
        ts_files = [
            e.name for e in entries
            if not e.is_dir and e.name.endswith((".ts", ".tsx")) and e.name != config.barrel_file
        ]
        has_barrel = lister.is_file(os.path.join(directory, config.barrel_file))
        if ts_files and not has_barrel:
            rel = os.path.relpath(directory, cwd)
            suggestions.append(Suggestion(
                SUGGESTION,
                f"{rel}/ has {len(ts_files)} .ts files with no {config.barrel_file}, consider adding a rule",
            ))
    return suggestions


def check_hand_written_barrels(config: ResolvedConfig, cwd: str, lister: DirectoryLister) -> List[DoctorCheck]:
    suggestions: List[DoctorCheck] = []
    seen = set()
    for rule in config.rules:
        for directory in _matched_dirs(rule, cwd, lister):
            path = os.path.join(directory, config.barrel_file)
            if path in seen:
                continue
            seen.add(path)
            try:
                content = read_existing(path)
            except (OSError, UnicodeDecodeError):
                continue
            if content is None:
                continue
            if not is_owned(content) and looks_like_barrel(content):
                rel = os.path.relpath(path, cwd)
                suggestions.append(Suggestion(
                    SUGGESTION,
                    f"{rel} looks like a hand-written barrel, barrelkeep could manage it",
                ))
    return suggestions


# ---------------------------------------------------------------------------
# Runner and output
# ---------------------------------------------------------------------------

def run_doctor(
    config: ResolvedConfig,
    cwd: str,
    *,
    config_path: Optional[str] = None,
    lister: Optional[DirectoryLister] = None,
) -> List[DoctorCheck]:
    cwd = os.path.abspath(cwd)
    lister = lister or OsDirectoryLister()
    checks: List[DoctorCheck] = []

    checks.extend(check_config(cwd, config_path))
    checks.append(check_rules_exist(config))
    for rule in config.rules:
        checks.append(check_rule_dirs_match(rule, cwd, lister))

    checks.append(check_extension_mode(cwd))
    checks.append(check_formatter(config, cwd))
    checks.append(check_cache(cwd))

    if config.rules:
        checks.append(check_staleness(config, cwd, lister))
        checks.extend(check_namespace_collisions(config, cwd, lister))

    checks.extend(check_unmanaged_directories(config, cwd, lister))
    checks.extend(check_hand_written_barrels(config, cwd, lister))
    return checks


def has_failures(checks: Sequence[DoctorCheck]) -> bool:
    return any(isinstance(c, Fail) for c in checks)


def format_check(check: DoctorCheck) -> str:
    def _fail(c: Fail) -> str:
        line = f"    {SYMBOLS['fail']} {c.message}"
        if c.fix:
            line += f"\n      {SYMBOLS['arrow']} {c.fix}"
        return line

    return match_check(
        check,
        passed=lambda c: f"    {SYMBOLS['pass']} {c.message}",
        failed=_fail,
        suggestion=lambda c: f"    {SYMBOLS['suggest']} {c.message}",
    )


def format_doctor_results(checks: Sequence[DoctorCheck]) -> str:
    groups: Dict[str, List[DoctorCheck]] = defaultdict(list)
    for check in checks:
        groups[check.category].append(check)

    sections = []
    for category in CATEGORY_ORDER:
        if not groups.get(category):
            continue
        lines = "\n".join(format_check(c) for c in groups[category])
        sections.append(f"  {CATEGORY_LABELS[category]}\n{lines}")

    counts = [
        (sum(1 for c in checks if isinstance(c, Pass)), "passed"),
        (sum(1 for c in checks if isinstance(c, Fail)), "failed"),
        (sum(1 for c in checks if isinstance(c, Suggestion)), "suggestions"),
    ]
    summary = ", ".join(f"{n} {label}" for n, label in counts if n > 0)
    return "\n" + "\n\n".join(sections) + f"\n\n  {summary}\n"


def check_to_dict(check: DoctorCheck) -> Dict[str, Optional[str]]:
    kind = match_check(check, passed=lambda _: "pass", failed=lambda _: "fail", suggestion=lambda _: "suggestion")
    data: Dict[str, Optional[str]] = {"status": kind, "category": check.category, "message": check.message}
    if isinstance(check, Fail) and check.fix:
        data["fix"] = check.fix
    return data
