"""Persistent per-directory scan cache.

Stored as JSON under ``node_modules/.cache/barrelkeep/cache.json``. The whole
cache is discarded when its version, config fingerprint, extension mode or
``tsconfig.json`` mtime no longer match; a single directory entry is reused
only when its filtered file list is exactly equal to the current one.
Any read or decode failure is treated as a miss.
"""
from __future__ import annotations

import json
import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from barrelkeep.config.schema import ResolvedConfig
from barrelkeep.core.config_hash import hash_config
from barrelkeep.logger import get_logger

logger = get_logger(__name__)

CACHE_VERSION = 1
CACHE_DIR = os.path.join("node_modules", ".cache", "barrelkeep")
CACHE_FILENAME = "cache.json"


@dataclass(frozen=True)
class CacheEntry:
    files: tuple
    barrel_content: str


@dataclass
class ScanCache:
    config_hash: str
    extension_mode: str
    tsconfig_mtime: float
    dirs: Dict[str, CacheEntry] = field(default_factory=dict)
    version: int = CACHE_VERSION
    touched: Set[str] = field(default_factory=set, repr=False, compare=False)

    def lookup(self, directory: str, files: Sequence[str]) -> Optional[CacheEntry]:
        """Entry for ``directory`` if its file list matches element for element."""
        self.touched.add(directory)
        entry = self.dirs.get(directory)
        if entry is None or list(entry.files) != list(files):
            return None
        return entry

    def store(self, directory: str, files: Sequence[str], barrel_content: str) -> None:
        self.touched.add(directory)
        self.dirs[directory] = CacheEntry(tuple(files), barrel_content)

    def prune(self, keep: Optional[Iterable[str]] = None) -> List[str]:
        """Drop entries not seen in this pass whose directory no longer exists."""
        keep_set = set(keep) if keep is not None else self.touched
        removed = [d for d in self.dirs if d not in keep_set and not os.path.isdir(d)]
        for d in removed:
            del self.dirs[d]
        return removed

    def to_json(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "config_hash": self.config_hash,
            "extension_mode": self.extension_mode,
            "tsconfig_mtime": self.tsconfig_mtime,
            "dirs": {
                d: {"files": list(e.files), "barrel_content": e.barrel_content}
                for d, e in sorted(self.dirs.items())
            },
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ScanCache":
        """Decode a cache document; raises ValueError/KeyError/TypeError when malformed."""
        if not isinstance(data, dict) or data.get("version") != CACHE_VERSION:
            raise ValueError("unsupported cache version")
        dirs: Dict[str, CacheEntry] = {}
        for d, raw in dict(data["dirs"]).items():
            files = raw["files"]
            content = raw["barrel_content"]
            if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
                raise TypeError(f"bad file list for {d}")
            if not isinstance(content, str):
                raise TypeError(f"bad barrel content for {d}")
            dirs[str(d)] = CacheEntry(tuple(files), content)
        return cls(
            config_hash=str(data["config_hash"]),
            extension_mode=str(data["extension_mode"]),
            tsconfig_mtime=float(data["tsconfig_mtime"]),
            dirs=dirs,
        )


def cache_path(cwd: str) -> Path:
    return Path(cwd) / CACHE_DIR / CACHE_FILENAME


def tsconfig_mtime(cwd: str) -> float:
    try:
        return os.path.getmtime(os.path.join(cwd, "tsconfig.json"))
    except OSError:
        return 0.0


def new_cache(cwd: str, config: ResolvedConfig, extension_mode: str) -> ScanCache:
    return ScanCache(
        config_hash=hash_config(config),
        extension_mode=extension_mode,
        tsconfig_mtime=tsconfig_mtime(cwd),
    )


def load_cache(cwd: str, config: ResolvedConfig, extension_mode: str) -> Optional[ScanCache]:
    """Load the cache if it is still valid for this config; otherwise None."""
    path = cache_path(cwd)
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            cache = ScanCache.from_json(json.load(f))
    except (json.JSONDecodeError, ValueError, KeyError, TypeError, OSError) as e:
        logger.debug("Ignoring unreadable scan cache", extra={"path": str(path), "error": str(e)})
        return None
    if cache.config_hash != hash_config(config):
        return None
    if cache.extension_mode != extension_mode:
        return None
    if cache.tsconfig_mtime != tsconfig_mtime(cwd):
        return None
    return cache


def save_cache(cwd: str, cache: ScanCache) -> None:
    """Atomically persist the cache. Failures are logged and ignored."""
    path = cache_path(cwd)
    temp_path = path.with_suffix(f".tmp.{uuid.uuid4().hex[:8]}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(cache.to_json(), f, indent=2, ensure_ascii=False)
        temp_path.replace(path)
    except OSError as e:
        logger.debug("Failed to save scan cache", extra={"path": str(path), "error": str(e)})
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass


def cache_size(cwd: str) -> Optional[int]:
    """Size in bytes of the cache file, or None when there is none."""
    try:
        return cache_path(cwd).stat().st_size
    except OSError:
        return None
