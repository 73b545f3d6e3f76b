"""CLI entry point: argparse dispatcher for all subcommands."""
from __future__ import annotations

import argparse
import json
import sys
import traceback


# ---------------------------------------------------------------------------
# Command registry: command name → (module_path, function_name)
# Lazy-imported at dispatch time to keep startup fast.
# ---------------------------------------------------------------------------
COMMANDS = {
    "generate": ("cli.commands.generate", "cmd_generate"),
    "check":    ("cli.commands.generate", "cmd_check"),
    "init":     ("cli.commands.init",     "cmd_init"),
    "watch":    ("cli.commands.watch",    "cmd_watch"),
    "doctor":   ("cli.commands.doctor",   "cmd_doctor"),
    "daemon":   ("cli.commands.daemon",   "cmd_daemon"),
}

# Exit code for missing or invalid configuration.
EXIT_CONFIG = 2


# ---------------------------------------------------------------------------
# Shared argparse helpers
# ---------------------------------------------------------------------------
def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("-c", "--config", help="Path to the config file (relative to --cwd)")
    p.add_argument("--cwd", default=None, help="Project root (default: current directory)")


# ---------------------------------------------------------------------------
# Parser builder
# ---------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    from cli._version import __version__

    parser = argparse.ArgumentParser(
        prog="barrelkeep",
        description="Keep generated barrel (index) files in sync with their directories",
    )
    parser.add_argument("--debug", action="store_true", help="Show stack traces on error")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    # generate
    p = sub.add_parser("generate", help="Generate barrel files from config rules")
    _add_common_args(p)
    p.add_argument("--dry-run", action="store_true", help="Preview changes without writing")
    p.add_argument("--no-cache", action="store_true", help="Ignore and do not update the scan cache")

    # check
    p = sub.add_parser("check", help="Exit non-zero when barrel files are stale (CI mode)")
    _add_common_args(p)

    # init
    p = sub.add_parser("init", help="Create a starter barrelkeep.config.yaml")
    p.add_argument("--cwd", default=None, help="Project root (default: current directory)")

    # watch
    p = sub.add_parser("watch", help="Regenerate barrel files on change (foreground)")
    _add_common_args(p)
    p.add_argument("--no-cache", action="store_true", help="Ignore and do not update the scan cache")

    # doctor
    p = sub.add_parser("doctor", help="Diagnose the project setup")
    _add_common_args(p)
    p.add_argument("--fix", action="store_true", help="Generate stale barrel files")

    # daemon
    p = sub.add_parser("daemon", help="Manage the background watcher")
    p.add_argument("action", choices=["start", "stop", "status"])
    _add_common_args(p)

    return parser


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------
def _load_command(name: str):
    """Resolve a registry entry to its ``cmd_*`` function."""
    import importlib

    mod_path, fn_name = COMMANDS[name]
    return getattr(importlib.import_module(mod_path), fn_name)


def _fail(exc: BaseException, *, debug: bool, code: int, with_type: bool = False) -> None:
    """Report ``exc`` as a JSON error document and exit with ``code``."""
    payload = {"ok": False, "error": str(exc)}
    if with_type:
        payload["type"] = type(exc).__name__
    json.dump(payload, sys.stdout, default=str)
    sys.stdout.write("\n")
    if debug:
        traceback.print_exc(file=sys.stderr)
    sys.exit(code)


def main(argv=None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    # --debug is accepted anywhere on the command line, not only before the subcommand.
    debug = "--debug" in argv
    args = build_parser().parse_args([a for a in argv if a != "--debug"])

    from barrelkeep.errors import ConfigInvalid, ConfigNotFound

    try:
        _load_command(args.command)(args)
    except KeyboardInterrupt:
        sys.exit(130)
    except (ConfigNotFound, ConfigInvalid) as exc:
        print(f"  ✗ {exc}", file=sys.stderr)
        _fail(exc, debug=debug, code=EXIT_CONFIG, with_type=True)
    except Exception as exc:
        _fail(exc, debug=debug, code=1)


if __name__ == "__main__":
    main()
