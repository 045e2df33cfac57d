from __future__ import annotations

import os

from ...storage.base import WordPressStore
from .base import ImmutableCapabilityMixin


class FilesCapability(ImmutableCapabilityMixin):
    """Generated files under the site's uploads directory.

    Paths handed in are resolved relative to the uploads base directory and
    must stay inside it.
    """

    __slots__ = ("_store",)

    _store: WordPressStore

    def __init__(self, *, store: WordPressStore) -> None:
        object.__setattr__(self, "_store", store)

    async def uploads_path(self, *parts: str) -> str:
        base = await self._store.uploads_basedir()
        path = os.path.normpath(os.path.join(base, *parts))
        if os.path.commonpath([os.path.normpath(base), path]) != os.path.normpath(base):
            raise ValueError(f"path escapes uploads directory: {os.path.join(*parts)}")
        return path

    async def glob(self, subdir: str, pattern: str) -> list[str]:
        return await self._store.list_files(await self.uploads_path(subdir), pattern)

    async def delete(self, path: str) -> bool:
        return await self._store.delete_file(path)
