"""Tagged per-key write actions.

Request payloads arrive as JSON objects in which an absent key, an explicit
``null`` and a value all mean different things. Handlers turn each field into
an ``UpdateAction`` once, at the boundary, and then match on the tag instead
of re-checking ``key in payload`` and ``value is None`` everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Set:
    value: Any


@dataclass(frozen=True)
class Delete:
    pass


@dataclass(frozen=True)
class Unchanged:
    pass


UpdateAction = Union[Set, Delete, Unchanged]

DELETE = Delete()
UNCHANGED = Unchanged()


def nullable_action(payload: dict[str, Any], key: str) -> UpdateAction:
    """``null`` deletes, a value sets, an absent key leaves storage alone."""
    if key not in payload:
        return UNCHANGED
    value = payload[key]
    return DELETE if value is None else Set(value)


def flag_action(payload: dict[str, Any], key: str) -> UpdateAction:
    """Presence flag: true stores the literal string ``'true'``, false deletes."""
    if key not in payload or payload[key] is None:
        return UNCHANGED
    return Set("true") if payload[key] else DELETE


def value_action(payload: dict[str, Any], key: str) -> UpdateAction:
    """A present, non-null value sets; ``null`` and absence both leave storage alone."""
    if payload.get(key) is None:
        return UNCHANGED
    return Set(payload[key])


def text_action(payload: dict[str, Any], key: str) -> UpdateAction:
    """Empty string deletes; any other string sets."""
    if payload.get(key) is None:
        return UNCHANGED
    value = payload[key]
    return DELETE if value == "" else Set(value)


async def apply_meta_action(store, post_id: int, meta_key: str, action: UpdateAction) -> bool:
    """Commit ``action`` for one post-meta key. Returns False for ``Unchanged``."""
    if isinstance(action, Set):
        await store.update_post_meta(post_id, meta_key, action.value)
        return True
    if isinstance(action, Delete):
        await store.delete_post_meta(post_id, meta_key)
        return True
    return False


async def apply_option_action(store, name: str, action: UpdateAction) -> bool:
    """Commit ``action`` for one option. Returns False for ``Unchanged``."""
    if isinstance(action, Set):
        await store.update_option(name, action.value)
        return True
    if isinstance(action, Delete):
        await store.delete_option(name)
        return True
    return False
