from __future__ import annotations

from functools import partial
from typing import Any, Callable

from ...storage.base import MISSING, OptionRow, WordPressStore
from ..allowlist import ALLOWED_OPTION_PREFIXES, allowed_option_names, is_allowed_option_name
from ..updates import UpdateAction, apply_option_action
from .base import ImmutableCapabilityMixin
from .theme_capability import ThemeCapability


class OptionsCapability(ImmutableCapabilityMixin):
    """Read and write ``wp_options`` rows.

    Raw access is unrestricted; handlers that take option names from callers
    screen them through the predicate from ``name_filter`` first.
    """

    __slots__ = ("_store", "_theme")

    _store: WordPressStore
    _theme: ThemeCapability

    def __init__(self, *, store: WordPressStore, theme: ThemeCapability) -> None:
        object.__setattr__(self, "_store", store)
        object.__setattr__(self, "_theme", theme)

    async def name_filter(self) -> Callable[[str], bool]:
        """Allow-list predicate bound to this call's theme identity."""
        return partial(is_allowed_option_name, theme=await self._theme.identity())

    async def allowed_names(self) -> list[str]:
        return allowed_option_names(await self._theme.identity())

    async def get(self, name: str, default: Any = MISSING) -> Any:
        return await self._store.get_option(name, default)

    async def update(self, name: str, value: Any) -> None:
        await self._store.update_option(name, value)

    async def delete(self, name: str) -> bool:
        return await self._store.delete_option(name)

    async def apply(self, name: str, action: UpdateAction) -> bool:
        """Commit one tagged option write. Returns False when nothing was written."""
        return await apply_option_action(self._store, name, action)

    async def list_rows(self, prefixes: list[str] | None, limit: int, offset: int) -> tuple[list[OptionRow], list[str]]:
        """List allowed option rows.

        ``prefixes`` is narrowed to the allowed prefixes; an empty result falls
        back to all of them. Theme-mod rows are always included. Returns the
        rows and the prefixes actually used.
        """
        used = [p for p in (prefixes or []) if p in ALLOWED_OPTION_PREFIXES]
        if not used:
            used = list(ALLOWED_OPTION_PREFIXES)
        rows = await self._store.list_options(used, await self.allowed_names(), limit, offset)
        return rows, used
