"""Watch command: regenerate barrel files on change (foreground)."""
from __future__ import annotations

import argparse
import os
import time
from datetime import datetime

from barrelkeep.config.loader import load_resolved_config
from barrelkeep.watch_core.session import WatchSession

from cli.core import SYMBOLS, echo, plural, resolve_cwd


def cmd_watch(args: argparse.Namespace) -> None:
    """Run an initial generation pass, then watch until interrupted."""
    cwd = resolve_cwd(args)
    config_path = getattr(args, "config", None)
    config = load_resolved_config(cwd, config_path)

    def on_written(paths):
        stamp = datetime.now().strftime("%H:%M:%S")
        for path in paths:
            echo(f"  [{stamp}] {SYMBOLS['update']}  {os.path.relpath(path, cwd)}")

    session = WatchSession(
        cwd,
        config,
        config_path=config_path,
        use_cache=not getattr(args, "no_cache", False),
        on_written=on_written,
    )
    written = session.run_initial()
    echo(f"\n  {SYMBOLS['pass']} Initial pass: {plural(len(written), 'file')} written")
    session.start()
    echo(f"  {SYMBOLS['pass']} Watching {cwd} for changes... (Ctrl+C to stop)\n")

    try:
        while True:
            time.sleep(1.0)
    except KeyboardInterrupt:
        echo("\nStopping watcher...")
    finally:
        session.stop()
