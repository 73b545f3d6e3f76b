"""Resolve the ``auto`` extension mode from ``tsconfig.json``.

``moduleResolution: bundler`` needs no extensions; ``node16``/``nodenext``
need ``.js`` specifiers, or ``.ts`` when the project imports TypeScript
extensions without emitting JavaScript. Anything else, or an unreadable
tsconfig, falls back to ``none``.
"""
from __future__ import annotations

import json
import os
import re
from typing import Any, Dict, List, Optional

from barrelkeep.logger import get_logger

logger = get_logger(__name__)

TSCONFIG_NAME = "tsconfig.json"
MAX_EXTENDS_DEPTH = 10

_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")


class TsconfigError(ValueError):
    pass


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of string literals."""
    out: List[str] = []
    i, n = 0, len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def parse_jsonc(text: str) -> Any:
    # Trailing commas are stripped after comments so "a, // x\n}" is handled.
    cleaned = _TRAILING_COMMA_RE.sub(r"\1", strip_json_comments(text))
    return json.loads(cleaned)


def _resolve_extends(base_dir: str, target: str) -> Optional[str]:
    if target.startswith(".") or os.path.isabs(target):
        path = os.path.normpath(os.path.join(base_dir, target))
        candidates = [path] if path.endswith(".json") else [path, path + ".json"]
    else:
        # Package reference, e.g. "@tsconfig/node20/tsconfig.json".
        candidates = []
        d = base_dir
        while True:
            pkg = os.path.join(d, "node_modules", target)
            candidates.extend([pkg, pkg + ".json", os.path.join(pkg, TSCONFIG_NAME)])
            parent = os.path.dirname(d)
            if parent == d:
                break
            d = parent
    for candidate in candidates:
        if os.path.isfile(candidate):
            return candidate
    return None


def load_compiler_options(path: str, depth: int = 0) -> Dict[str, Any]:
    """compilerOptions of ``path`` merged over everything it extends."""
    if depth > MAX_EXTENDS_DEPTH:
        raise TsconfigError(f"extends chain too deep at {path}")
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            data = parse_jsonc(f.read())
    except (OSError, ValueError) as e:
        raise TsconfigError(f"cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise TsconfigError(f"{path} is not a JSON object")

    options: Dict[str, Any] = {}
    extends = data.get("extends")
    bases = [extends] if isinstance(extends, str) else list(extends or [])
    for base in bases:
        if not isinstance(base, str):
            continue
        resolved = _resolve_extends(os.path.dirname(path), base)
        if resolved is None:
            raise TsconfigError(f"cannot resolve extends {base!r} from {path}")
        options.update(load_compiler_options(resolved, depth + 1))

    own = data.get("compilerOptions") or {}
    if isinstance(own, dict):
        options.update(own)
    return options


def mode_from_options(options: Dict[str, Any]) -> str:
    resolution = str(options.get("moduleResolution") or "").lower()
    if resolution == "bundler":
        return "none"
    if resolution in ("node16", "nodenext"):
        allow_ts = options.get("allowImportingTsExtensions") is True
        no_emit = options.get("noEmit") is True
        decl_only = options.get("emitDeclarationOnly") is True
        return ".ts" if allow_ts and (no_emit or decl_only) else ".js"
    return "none"


def detect_extension_mode(cwd: str) -> str:
    path = os.path.join(cwd, TSCONFIG_NAME)
    if not os.path.exists(path):
        return "none"
    try:
        options = load_compiler_options(path)
    except TsconfigError as e:
        logger.warning(
            "Could not read tsconfig.json, defaulting to no extensions",
            extra={"path": path, "error": str(e)},
        )
        return "none"
    return mode_from_options(options)


def resolve_extension_mode(configured: str, cwd: str) -> str:
    """Concrete mode for a configured ``extensions`` value."""
    if configured == "auto":
        return detect_extension_mode(cwd)
    return configured
