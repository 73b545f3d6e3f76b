"""Shared helpers for CLI commands."""
from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, Iterable, List

from barrelkeep.core.action import Action, Conflict, Create, Skip, Update, action_kind, match_action
from barrelkeep.core.planner import PlanResult

SYMBOLS = {
    "pass": "✓",
    "fail": "✗",
    "warn": "⚠",
    "info": "ℹ",
    "arrow": "→",
    "create": "CREATE",
    "update": "UPDATE",
    "skip": "SKIP",
    "conflict": "CONFLICT",
}


def output_json(data: Any) -> None:
    """Write JSON to stdout, the single place for all commands."""
    json.dump(data, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def echo(message: str = "") -> None:
    """Human-readable progress goes to stderr so stdout stays JSON."""
    print(message, file=sys.stderr)


def resolve_cwd(args) -> str:
    return os.path.abspath(getattr(args, "cwd", None) or os.getcwd())


def plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def format_action(action: Action, cwd: str) -> str:
    rel = os.path.relpath(action.path, cwd)
    return match_action(
        action,
        create=lambda a: f"  {SYMBOLS['create']}  {rel}",
        update=lambda a: f"  {SYMBOLS['update']}  {rel}",
        skip=lambda a: f"  {SYMBOLS['skip']}    {rel} ({a.reason})",
        conflict=lambda a: f"  {SYMBOLS['conflict']}  {rel} ({a.reason})",
    )


def format_duration(ms: float) -> str:
    return f"{int(ms)}ms" if ms < 1000 else f"{ms / 1000:.1f}s"


def count_actions(actions: Iterable[Action]) -> Dict[str, int]:
    counts = {"create": 0, "update": 0, "skip": 0, "conflict": 0}
    for action in actions:
        counts[action_kind(action)] += 1
    return counts


def format_summary(actions: Iterable[Action]) -> str:
    counts = count_actions(actions)
    parts = [
        f"{counts['create']} created" if counts["create"] else "",
        f"{counts['update']} updated" if counts["update"] else "",
        f"{counts['skip']} up-to-date" if counts["skip"] else "",
        f"{counts['conflict']} conflicts" if counts["conflict"] else "",
    ]
    return ", ".join(p for p in parts if p)


def plan_to_json(result: PlanResult, cwd: str) -> Dict[str, Any]:
    actions: List[Dict[str, Any]] = []
    for action in result.actions:
        entry: Dict[str, Any] = {"action": action_kind(action), "path": os.path.relpath(action.path, cwd)}
        if isinstance(action, (Skip, Conflict)):
            entry["reason"] = action.reason
        actions.append(entry)
    return {
        "actions": actions,
        "errors": [
            {"directory": e.directory, "error": str(e.error), "type": type(e.error).__name__}
            for e in result.errors
        ],
        "counts": count_actions(result.actions),
    }


def report_errors(result: PlanResult, cwd: str) -> None:
    for err in result.errors:
        where = err.directory if err.directory.startswith("rule(") else os.path.relpath(err.directory, cwd)
        echo(f"  {SYMBOLS['fail']} {where}: {err.error}")


def is_stale(action: Action) -> bool:
    return isinstance(action, (Create, Update))
