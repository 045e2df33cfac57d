from __future__ import annotations

from ...storage.base import PremiumInfo, ThemeInfo, WordPressStore
from .base import ImmutableCapabilityMixin


class ThemeCapability(ImmutableCapabilityMixin):
    """Active theme identity, read once per request.

    The allow-list for ``theme_mods_*`` options depends on this identity, so
    every check inside one ability call sees the same theme even if the site
    switches themes mid-call.
    """

    __slots__ = ("_cached", "_store")

    _store: WordPressStore
    _cached: ThemeInfo | None

    def __init__(self, *, store: WordPressStore) -> None:
        object.__setattr__(self, "_store", store)
        object.__setattr__(self, "_cached", None)

    async def identity(self) -> ThemeInfo:
        if self._cached is None:
            object.__setattr__(self, "_cached", await self._store.get_theme())
        return self._cached

    async def premium(self) -> PremiumInfo:
        return await self._store.get_premium()

    async def regenerate_dynamic_css(self) -> bool:
        """Ask the theme runtime to rebuild its CSS cache; False when unsupported."""
        return await self._store.regenerate_dynamic_css()
