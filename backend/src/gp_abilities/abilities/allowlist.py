"""Option-name and meta-key allow-lists.

Every externally supplied option name or post-meta key passes through one of
these predicates before it reaches the store. The option allow-list depends on
the active theme, so callers resolve the theme for the current request and
pass it in.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..storage.base import ThemeInfo

ALLOWED_OPTION_PREFIXES: tuple[str, ...] = ("generate_", "gp_", "generatepress_", "generateblocks_")

ALLOWED_META_PREFIX = "_generate_"


def allowed_option_names(theme: ThemeInfo) -> list[str]:
    """Exact option names allowed for the given theme (its theme_mods rows)."""
    names = []
    if theme.stylesheet:
        names.append(f"theme_mods_{theme.stylesheet}")
    if theme.template and theme.template != theme.stylesheet:
        names.append(f"theme_mods_{theme.template}")
    return names


def is_allowed_option_name(name: str, theme: ThemeInfo) -> bool:
    if name in allowed_option_names(theme):
        return True
    return name.startswith(ALLOWED_OPTION_PREFIXES)


def is_allowed_meta_key(key: str) -> bool:
    return key.startswith(ALLOWED_META_PREFIX)


def usable_key(value: Any) -> bool:
    """Non-empty strings only; anything else is skipped without being reported."""
    return isinstance(value, str) and value != ""


@dataclass
class KeyPartition:
    """Outcome of screening a batch of keys against an allow-list."""

    allowed: list[str] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)


def partition_keys(keys: Iterable[Any], predicate) -> KeyPartition:
    """Split ``keys`` into allowed and rejected, preserving input order.

    Empty and non-string keys land in neither list.
    """
    result = KeyPartition()
    for key in keys:
        if not usable_key(key):
            continue
        (result.allowed if predicate(key) else result.rejected).append(key)
    return result
