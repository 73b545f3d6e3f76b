"""Value types shared by the scanner, renderer and cache."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

_LAST_EXT_RE = re.compile(r"\.[^.]+$")

STAR = "star"
NAMESPACE = "namespace"


def strip_extension(filename: str) -> str:
    """Drop the last extension: ``foo.bar.ts`` -> ``foo.bar``."""
    return _LAST_EXT_RE.sub("", filename)


def last_extension(filename: str) -> str:
    m = _LAST_EXT_RE.search(filename)
    return m.group(0) if m else ""


@dataclass(frozen=True)
class ModuleEntry:
    """One file (or sub-directory with its own barrel) re-exported by a barrel."""

    filename: str
    specifier: str
    style: str
    is_directory: bool = False

    @classmethod
    def make(cls, filename: str, style: str, is_directory: bool = False) -> "ModuleEntry":
        specifier = filename if is_directory else strip_extension(filename)
        return cls(filename=filename, specifier=specifier, style=style, is_directory=is_directory)

    @property
    def cache_key(self) -> str:
        return self.filename + "/" if self.is_directory else self.filename


@dataclass(frozen=True)
class ScanResult:
    directory: str
    modules: Tuple[ModuleEntry, ...]

    @property
    def files(self) -> Tuple[str, ...]:
        """Filtered file list used as the scan-cache key."""
        return tuple(m.cache_key for m in self.modules)
