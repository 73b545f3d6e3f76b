"""Doctor command: diagnose the project setup."""
from __future__ import annotations

import argparse
import sys

from barrelkeep.config.loader import load_resolved_config
from barrelkeep.config.schema import build_config
from barrelkeep.core.doctor import check_to_dict, format_doctor_results, has_failures, run_doctor
from barrelkeep.core.formatter import format_files, resolve_formatter
from barrelkeep.core.planner import execute, plan
from barrelkeep.errors import ConfigInvalid, ConfigNotFound

from cli.core import SYMBOLS, echo, output_json, plural, resolve_cwd


def cmd_doctor(args: argparse.Namespace) -> None:
    """Run all checks; with --fix, write stale barrels first."""
    cwd = resolve_cwd(args)
    config_path = getattr(args, "config", None)
    try:
        config = load_resolved_config(cwd, config_path)
    except (ConfigNotFound, ConfigInvalid):
        # Reported by the setup checks; continue with an empty config.
        config = build_config({})

    fixed = []
    if getattr(args, "fix", False) and config.rules:
        fixed = execute(plan(config, cwd))
        if fixed:
            echo(f"\n  {SYMBOLS['pass']} Fixed {plural(len(fixed), 'stale index file')}")
            formatter = resolve_formatter(config.formatter, cwd)
            if formatter is not None:
                format_files(formatter, fixed, cwd)

    checks = run_doctor(config, cwd, config_path=config_path)
    echo(format_doctor_results(checks))

    failed = has_failures(checks)
    output_json({"ok": not failed, "fixed": fixed, "checks": [check_to_dict(c) for c in checks]})
    if failed:
        sys.exit(1)
