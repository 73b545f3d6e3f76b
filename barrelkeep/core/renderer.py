"""Barrel text rendering.

Rendering is a pure function of the module list and extension mode; it never
reads the filesystem, so the output can be compared byte-for-byte against what
is on disk.
"""
from __future__ import annotations

from typing import Iterable, List

from barrelkeep.core.entities import NAMESPACE, STAR, ModuleEntry, last_extension
from barrelkeep.core.header import HEADER_LINE
from barrelkeep.core.naming import namespace_name

EXTENSION_MODES = ("none", ".js", ".ts")

# Source extension -> compiled extension for ".js" mode.
_JS_EXTENSION_MAP = {
    ".mts": ".mjs",
    ".mjs": ".mjs",
    ".cts": ".cjs",
    ".cjs": ".cjs",
}


def map_specifier(module: ModuleEntry, extension_mode: str) -> str:
    """Import path for ``module`` relative to its barrel."""
    base = f"./{module.specifier}"
    if module.is_directory or extension_mode == "none":
        return base
    ext = last_extension(module.filename)
    if extension_mode == ".ts":
        return base + ext
    if extension_mode == ".js":
        return base + _JS_EXTENSION_MAP.get(ext, ".js")
    raise ValueError(f"Unknown extension mode: {extension_mode!r}")


def render_line(module: ModuleEntry, extension_mode: str) -> str:
    spec = map_specifier(module, extension_mode)
    if module.style == STAR:
        return f"export * from '{spec}';"
    if module.style == NAMESPACE:
        return f"export * as {namespace_name(module)} from '{spec}';"
    raise ValueError(f"Unknown export style: {module.style!r}")


def render_barrel(modules: Iterable[ModuleEntry], extension_mode: str) -> str:
    """Header line followed by one newline-terminated export per module."""
    lines: List[str] = [render_line(m, extension_mode) + "\n" for m in modules]
    return HEADER_LINE + "".join(lines)
