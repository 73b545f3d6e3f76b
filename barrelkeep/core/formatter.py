"""Detect and run the project's code formatter on written barrels."""
from __future__ import annotations

import json
import os
import subprocess
from typing import List, Optional, Sequence, Tuple, Union

from barrelkeep.logger import get_logger

logger = get_logger(__name__)

FORMATTER_TIMEOUT_SECS = 60

_CONFIG_FILES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("biome", ("biome.json", "biome.jsonc")),
    ("dprint", ("dprint.json", ".dprint.json")),
    (
        "prettier",
        (
            ".prettierrc",
            ".prettierrc.json",
            ".prettierrc.yml",
            ".prettierrc.yaml",
            ".prettierrc.js",
            ".prettierrc.cjs",
            ".prettierrc.mjs",
            "prettier.config.js",
            "prettier.config.cjs",
            "prettier.config.mjs",
        ),
    ),
)

_DEV_DEPENDENCIES = (
    ("@biomejs/biome", "biome"),
    ("dprint", "dprint"),
    ("prettier", "prettier"),
)

_COMMANDS = {
    "biome": ["biome", "format", "--write"],
    "dprint": ["dprint", "fmt"],
    "prettier": ["prettier", "--write"],
    "oxfmt": ["oxfmt"],
}


def detect_formatter(cwd: str) -> Optional[str]:
    """Formatter implied by config files, then by package.json devDependencies."""
    for kind, names in _CONFIG_FILES:
        if any(os.path.exists(os.path.join(cwd, name)) for name in names):
            return kind
    try:
        with open(os.path.join(cwd, "package.json"), "r", encoding="utf-8") as f:
            pkg = json.load(f)
    except (OSError, ValueError):
        return None
    dev_deps = pkg.get("devDependencies") if isinstance(pkg, dict) else None
    if not isinstance(dev_deps, dict):
        return None
    for package, kind in _DEV_DEPENDENCIES:
        if package in dev_deps:
            return kind
    return None


def resolve_formatter(configured: Union[str, bool], cwd: str) -> Optional[str]:
    if configured is False:
        return None
    if configured == "auto":
        return detect_formatter(cwd)
    return str(configured)


def formatter_command(kind: str, files: Sequence[str]) -> List[str]:
    return ["npx", *_COMMANDS[kind], *files]


def format_files(kind: str, files: Sequence[str], cwd: str) -> bool:
    """Run the formatter over ``files``. Never raises; returns success."""
    if not files:
        return True
    cmd = formatter_command(kind, files)
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=FORMATTER_TIMEOUT_SECS,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Formatter failed to run", extra={"formatter": kind, "error": str(e)})
        return False
    if proc.returncode != 0:
        logger.warning(
            "Formatter exited with an error",
            extra={"formatter": kind, "returncode": proc.returncode, "stderr": (proc.stderr or "")[-500:]},
        )
        return False
    return True
