"""Installed package version, read from distribution metadata."""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("barrelkeep")
except PackageNotFoundError:
    # Running from a source checkout without `pip install -e .`
    __version__ = "0.0.0+local"
