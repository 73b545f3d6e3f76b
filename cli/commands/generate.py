"""Generation commands: generate, check."""
from __future__ import annotations

import argparse
import sys
import time

from barrelkeep.config.loader import load_resolved_config
from barrelkeep.core.formatter import format_files, resolve_formatter
from barrelkeep.core.planner import execute, plan, plan_with_cache

from cli.core import (
    SYMBOLS,
    echo,
    format_action,
    format_duration,
    format_summary,
    is_stale,
    output_json,
    plan_to_json,
    plural,
    report_errors,
    resolve_cwd,
)


def cmd_generate(args: argparse.Namespace) -> None:
    """Plan every rule and write the changed barrel files."""
    cwd = resolve_cwd(args)
    config = load_resolved_config(cwd, getattr(args, "config", None))
    echo(f"\n  {SYMBOLS['pass']} Loaded config ({plural(len(config.rules), 'rule')})")

    start = time.monotonic()
    use_cache = not getattr(args, "no_cache", False)
    dry_run = getattr(args, "dry_run", False)

    if dry_run:
        # A dry run never touches the cache file.
        result = plan(config, cwd)
        echo(f"  {SYMBOLS['info']} Dry run, no files will be written\n")
        written = []
    else:
        result = plan_with_cache(config, cwd, use_cache=use_cache)
        written = execute(result)

    for action in result.actions:
        echo(format_action(action, cwd))
    report_errors(result, cwd)

    formatter = None
    if written:
        formatter = resolve_formatter(config.formatter, cwd)
        if formatter is not None and format_files(formatter, written, cwd):
            echo(f"\n  {SYMBOLS['pass']} Formatted {plural(len(written), 'file')} with {formatter}")

    elapsed_ms = (time.monotonic() - start) * 1000
    summary = format_summary(result.actions)
    if dry_run:
        stale = sum(1 for a in result.actions if is_stale(a))
        summary = f"{stale} would change" + (f" ({summary})" if summary else "")
    echo(f"\n  {summary}  ⏱ {format_duration(elapsed_ms)}")

    payload = plan_to_json(result, cwd)
    payload.update({
        "ok": not result.errors,
        "dry_run": dry_run,
        "written": written,
        "formatter": formatter,
    })
    output_json(payload)
    if result.errors:
        sys.exit(1)


def cmd_check(args: argparse.Namespace) -> None:
    """Exit 1 when any barrel file would be created or updated."""
    cwd = resolve_cwd(args)
    config = load_resolved_config(cwd, getattr(args, "config", None))
    result = plan(config, cwd)
    stale = [a for a in result.actions if is_stale(a)]

    if stale:
        verb = "is" if len(stale) == 1 else "are"
        echo(f"\n  {SYMBOLS['fail']} {plural(len(stale), 'index file')} {verb} stale\n")
        for action in stale:
            echo(format_action(action, cwd))
        echo("\n  Run barrelkeep generate to fix.")
    else:
        total = len(result.actions)
        verb = "is" if total == 1 else "are"
        echo(f"\n  {SYMBOLS['pass']} All {plural(total, 'index file')} {verb} up-to-date\n")
    report_errors(result, cwd)

    payload = plan_to_json(result, cwd)
    payload.update({"ok": not stale and not result.errors, "stale": len(stale)})
    output_json(payload)
    if stale or result.errors:
        sys.exit(1)
