from __future__ import annotations

from typing import Any

from ...storage.base import Post, PostQuery, PostQueryResult, WordPressStore
from ..updates import UpdateAction, apply_meta_action
from .base import ImmutableCapabilityMixin


class PostsCapability(ImmutableCapabilityMixin):
    """Posts and post meta."""

    __slots__ = ("_store",)

    _store: WordPressStore

    def __init__(self, *, store: WordPressStore) -> None:
        object.__setattr__(self, "_store", store)

    async def type_exists(self, post_type: str) -> bool:
        return await self._store.post_type_exists(post_type)

    async def get(self, post_id: int) -> Post | None:
        return await self._store.get_post(post_id)

    async def insert(self, *, post_type: str, title: str, status: str, slug: str = "", content: str = "") -> int:
        return await self._store.insert_post(
            post_type=post_type, title=title, status=status, slug=slug, content=content
        )

    async def update(self, post_id: int, fields: dict[str, Any]) -> None:
        await self._store.update_post(post_id, fields)

    async def delete(self, post_id: int, *, force: bool = False) -> bool:
        return await self._store.delete_post(post_id, force)

    async def query(
        self,
        *,
        post_type: str,
        status: str = "any",
        meta_equals: dict[str, Any] | None = None,
        search: str = "",
        per_page: int = 50,
        page: int = 1,
        orderby: str = "modified",
        order: str = "DESC",
    ) -> PostQueryResult:
        return await self._store.query_posts(
            PostQuery(
                post_type=post_type,
                status=status,
                meta_equals=dict(meta_equals or {}),
                search=search,
                per_page=per_page,
                page=page,
                orderby=orderby,
                order=order,
            )
        )

    async def get_meta(self, post_id: int, key: str) -> Any:
        return await self._store.get_post_meta(post_id, key)

    async def update_meta(self, post_id: int, key: str, value: Any) -> None:
        await self._store.update_post_meta(post_id, key, value)

    async def delete_meta(self, post_id: int, key: str) -> bool:
        return await self._store.delete_post_meta(post_id, key)

    async def apply_meta(self, post_id: int, key: str, action: UpdateAction) -> bool:
        """Commit one tagged meta write. Returns False when nothing was written."""
        return await apply_meta_action(self._store, post_id, key, action)
