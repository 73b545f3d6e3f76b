"""Directory listing capability used by the scanner.

The scanner only talks to a ``DirectoryLister`` so it can be exercised with an
in-memory tree in tests.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Protocol


@dataclass(frozen=True)
class DirEntry:
    name: str
    is_dir: bool


class DirectoryLister(Protocol):
    def list_entries(self, path: str) -> List[DirEntry]: ...

    def is_file(self, path: str) -> bool: ...


class OsDirectoryLister:
    """Lists entries with ``os.scandir`` (symlinks followed)."""

    def list_entries(self, path: str) -> List[DirEntry]:
        entries: List[DirEntry] = []
        with os.scandir(path) as it:
            for entry in it:
                try:
                    is_dir = entry.is_dir()
                except OSError:
                    is_dir = False
                entries.append(DirEntry(entry.name, is_dir))
        return entries

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)


class MemoryDirectoryLister:
    """In-memory tree keyed by absolute POSIX paths.

    ``files`` lists every file path; directories are implied by their parents.
    Paths listed in ``unreadable`` raise ``PermissionError`` when listed.
    """

    def __init__(self, root: str, files: Iterable[str], dirs: Iterable[str] = (), unreadable: Iterable[str] = ()):
        self.root = root.rstrip("/") or "/"
        self._files = set()
        self._children: Dict[str, Dict[str, bool]] = {self.root: {}}
        self._unreadable = {self._abs(p) for p in unreadable}
        for d in dirs:
            self._add_dir(self._abs(d))
        for f in files:
            path = self._abs(f)
            self._files.add(path)
            parent, name = path.rsplit("/", 1)
            self._add_dir(parent or "/")
            self._children[parent or "/"][name] = False

    def _abs(self, rel: str) -> str:
        rel = rel.strip("/")
        return f"{self.root}/{rel}" if rel else self.root

    def _add_dir(self, path: str) -> None:
        while path not in self._children:
            self._children[path] = {}
            parent, name = path.rsplit("/", 1)
            parent = parent or "/"
            if parent not in self._children:
                self._add_dir(parent)
            self._children[parent][name] = True
            path = parent

    def list_entries(self, path: str) -> List[DirEntry]:
        path = path.rstrip("/") or "/"
        if path in self._unreadable:
            raise PermissionError(13, "Permission denied", path)
        if path not in self._children:
            raise FileNotFoundError(2, "No such file or directory", path)
        return [DirEntry(name, is_dir) for name, is_dir in self._children[path].items()]

    def is_file(self, path: str) -> bool:
        return path in self._files
