"""Namespace identifier derivation and collision checks."""
from __future__ import annotations

import re
from typing import Dict, Iterable, Tuple

from barrelkeep.core.entities import NAMESPACE, ModuleEntry, strip_extension
from barrelkeep.errors import InvalidIdentifier, NamespaceCollision

_SEPARATORS_RE = re.compile(r"[-_.]+")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def to_pascal_case(filename: str, strip_ext: bool = True) -> str:
    """Convert ``foo-bar_baz.ts`` to ``FooBarBaz``.

    Raises:
        InvalidIdentifier: the result is not a valid JS identifier
            (for example it starts with a digit).
    """
    stem = strip_extension(filename) if strip_ext else filename
    result = "".join(part[:1].upper() + part[1:] for part in _SEPARATORS_RE.split(stem))
    if not _IDENTIFIER_RE.match(result):
        raise InvalidIdentifier(filename, result)
    return result


def namespace_name(module: ModuleEntry) -> str:
    # Directory names are used whole; they carry no extension.
    return to_pascal_case(module.filename, strip_ext=not module.is_directory)


def check_collisions(modules: Iterable[ModuleEntry]) -> None:
    """Fail when two namespace modules map to the same identifier.

    Comparison is case-insensitive. Star-style modules are ignored since they
    introduce no identifier.
    """
    seen: Dict[str, Tuple[str, str]] = {}
    for mod in modules:
        if mod.style != NAMESPACE:
            continue
        derived = namespace_name(mod)
        key = derived.lower()
        existing = seen.get(key)
        if existing is not None and existing[0] != mod.filename:
            raise NamespaceCollision(existing[0], mod.filename, derived)
        seen[key] = (mod.filename, derived)
