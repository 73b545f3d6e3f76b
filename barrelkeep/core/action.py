"""Planned write actions.

``Action`` is a closed union of four frozen dataclasses. Consumers dispatch
with ``match_action`` so that every variant must be handled.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Create:
    path: str
    content: str


@dataclass(frozen=True)
class Update:
    path: str
    content: str


@dataclass(frozen=True)
class Skip:
    path: str
    reason: str


@dataclass(frozen=True)
class Conflict:
    path: str
    reason: str


Action = Union[Create, Update, Skip, Conflict]


def match_action(
    action: Action,
    *,
    create: Callable[[Create], T],
    update: Callable[[Update], T],
    skip: Callable[[Skip], T],
    conflict: Callable[[Conflict], T],
) -> T:
    if isinstance(action, Create):
        return create(action)
    if isinstance(action, Update):
        return update(action)
    if isinstance(action, Skip):
        return skip(action)
    if isinstance(action, Conflict):
        return conflict(action)
    raise TypeError(f"Unknown action: {action!r}")


def is_writable(action: Action) -> bool:
    return isinstance(action, (Create, Update))


def action_kind(action: Action) -> str:
    """Lower-case variant name, used in JSON output."""
    return match_action(
        action,
        create=lambda _: "create",
        update=lambda _: "update",
        skip=lambda _: "skip",
        conflict=lambda _: "conflict",
    )
