"""Init command: write a starter config file."""
from __future__ import annotations

import argparse
import os

from barrelkeep.config.loader import CONFIG_NAMES, STARTER_CONFIG

from cli.core import SYMBOLS, echo, output_json, resolve_cwd


def cmd_init(args: argparse.Namespace) -> None:
    cwd = resolve_cwd(args)
    existing = [name for name in CONFIG_NAMES if os.path.exists(os.path.join(cwd, name))]
    if existing:
        echo(f"\n  {SYMBOLS['fail']} {existing[0]} already exists\n")
        output_json({"ok": False, "created": None, "existing": existing[0]})
        return

    name = CONFIG_NAMES[0]
    with open(os.path.join(cwd, name), "w", encoding="utf-8") as f:
        f.write(STARTER_CONFIG)

    echo(f"\n  {SYMBOLS['pass']} Created {name}")
    echo("\n  Next steps:")
    echo("    1. Edit the config to define your rules")
    echo("    2. Run barrelkeep generate to create index files")
    echo("    3. Run barrelkeep doctor to validate your setup\n")
    output_json({"ok": True, "created": name})
