"""Daemon command: start, stop or inspect the background watcher."""
from __future__ import annotations

import argparse
from dataclasses import asdict

from barrelkeep.config.loader import find_config
from barrelkeep.daemon import get_daemon_status, start_daemon, stop_daemon

from cli.core import SYMBOLS, echo, output_json, resolve_cwd


def cmd_daemon(args: argparse.Namespace) -> None:
    cwd = resolve_cwd(args)
    action = args.action
    config_path = getattr(args, "config", None)

    if action == "start":
        # Fail fast in the foreground rather than in the detached child.
        find_config(cwd, config_path)
        before = get_daemon_status(cwd)
        status = start_daemon(cwd, config_path)
        if before.running:
            echo(f"\n  {SYMBOLS['info']} Daemon already running (pid {status.pid})\n")
        else:
            echo(f"\n  {SYMBOLS['pass']} Daemon started (pid {status.pid})")
            echo(f"    Log: {status.log_file}\n")
    elif action == "stop":
        before = get_daemon_status(cwd)
        status = stop_daemon(cwd)
        if before.running:
            echo(f"\n  {SYMBOLS['pass']} Daemon stopped (pid {before.pid})\n")
        else:
            echo(f"\n  {SYMBOLS['info']} Daemon is not running\n")
    else:
        status = get_daemon_status(cwd)
        if status.running:
            echo(f"\n  {SYMBOLS['pass']} Daemon running (pid {status.pid})")
            echo(f"    Log: {status.log_file}\n")
        else:
            echo(f"\n  {SYMBOLS['info']} Daemon is not running\n")

    output_json({"ok": True, "action": action, **asdict(status)})
