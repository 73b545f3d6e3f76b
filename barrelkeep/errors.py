"""Exception hierarchy for barrelkeep."""
from __future__ import annotations

from typing import Sequence


class BarrelkeepError(Exception):
    """Base exception for all barrelkeep errors."""
    pass


class ConfigNotFound(BarrelkeepError):
    """No configuration file was found in the working directory."""

    def __init__(self, cwd: str, searched: Sequence[str]):
        self.cwd = cwd
        self.searched = tuple(searched)
        super().__init__(f"No config found in {cwd} (searched: {', '.join(self.searched)})")


class ConfigInvalid(BarrelkeepError):
    """The configuration file could not be parsed or failed validation."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Invalid config at {path}: {message}")


class NamespaceCollision(BarrelkeepError):
    """Two namespace-style modules derive the same export identifier."""

    def __init__(self, filename1: str, filename2: str, derived_name: str):
        self.filename1 = filename1
        self.filename2 = filename2
        self.derived_name = derived_name
        super().__init__(
            f"Namespace collision: {filename1} and {filename2} both map to {derived_name}"
        )


class InvalidIdentifier(BarrelkeepError):
    """A filename does not convert to a valid namespace identifier."""

    def __init__(self, filename: str, result: str):
        self.filename = filename
        self.result = result
        super().__init__(f"Cannot derive a namespace identifier from {filename!r} (got {result!r})")


class ScanError(BarrelkeepError):
    """A directory or rule glob could not be read."""

    def __init__(self, directory: str, cause: BaseException):
        self.directory = directory
        self.cause = cause
        super().__init__(f"Failed to scan {directory}: {cause}")
