"""In-memory WordPress store.

Keeps options, posts and post meta in dictionaries and the uploads tree on the
real filesystem, so cache-clearing abilities can be exercised end to end.
Used by the test-suite and for local development without a site.
"""

from __future__ import annotations

import copy
import fnmatch
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..abilities.sanitize import sanitize_title
from ..core.logging import get_logger
from .base import (
    GP_ELEMENTS_POST_TYPE,
    MISSING,
    OptionRow,
    Post,
    PostQuery,
    PostQueryResult,
    PremiumInfo,
    ThemeInfo,
)

logger = get_logger(__name__)

_ORDERBY_FIELDS = {
    "date": "date_gmt",
    "modified": "modified_gmt",
    "title": "title",
    "menu_order": "menu_order",
    "ID": "id",
}


def _now_gmt() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")


class InMemoryStore:
    """Dictionary-backed implementation of ``WordPressStore``.

    Values are deep-copied on the way in and out so callers can never mutate
    stored state through a returned reference.
    """

    def __init__(
        self,
        *,
        theme: ThemeInfo | None = None,
        premium: PremiumInfo | None = None,
        post_types: set[str] | None = None,
        uploads_dir: str | os.PathLike[str] | None = None,
        dynamic_css_supported: bool = True,
    ) -> None:
        self.theme = theme or ThemeInfo(
            name="GeneratePress", version="3.5.1", template="generatepress", stylesheet="generatepress"
        )
        self.premium = premium or PremiumInfo()
        if post_types is None:
            post_types = {"post", "page", GP_ELEMENTS_POST_TYPE}
        self.post_types: set[str] = set(post_types)
        self.options: dict[str, Any] = {}
        self.autoload: dict[str, str] = {}
        self.posts: dict[int, Post] = {}
        self.meta: dict[int, dict[str, Any]] = {}
        self.dynamic_css_supported = dynamic_css_supported
        self.dynamic_css_regenerations = 0
        self._next_id = 1
        self._uploads_dir = Path(uploads_dir) if uploads_dir else Path(tempfile.mkdtemp(prefix="gp-abilities-uploads-"))

    @property
    def uploads_dir(self) -> Path:
        return self._uploads_dir

    # -- seeding helpers (synchronous, for tests and fixtures) --------------

    def seed_option(self, name: str, value: Any, autoload: str = "yes") -> None:
        self.options[name] = copy.deepcopy(value)
        self.autoload[name] = autoload

    def seed_post(self, post_type: str, title: str = "", meta: dict[str, Any] | None = None, **fields: Any) -> int:
        post_id = self._allocate_id()
        now = _now_gmt()
        fields.setdefault("date_gmt", now)
        fields.setdefault("modified_gmt", now)
        self.posts[post_id] = Post(id=post_id, post_type=post_type, title=title, **fields)
        self.meta[post_id] = copy.deepcopy(meta or {})
        return post_id

    def _allocate_id(self) -> int:
        post_id = self._next_id
        self._next_id += 1
        return post_id

    # -- options ------------------------------------------------------------

    async def get_option(self, name: str, default: Any = MISSING) -> Any:
        if name not in self.options:
            return default
        return copy.deepcopy(self.options[name])

    async def update_option(self, name: str, value: Any) -> None:
        self.options[name] = copy.deepcopy(value)
        self.autoload.setdefault(name, "yes")

    async def delete_option(self, name: str) -> bool:
        self.autoload.pop(name, None)
        return self.options.pop(name, MISSING) is not MISSING

    async def list_options(self, prefixes: list[str], names: list[str], limit: int, offset: int) -> list[OptionRow]:
        matched = sorted(n for n in self.options if n in names or any(n.startswith(p) for p in prefixes))
        return [OptionRow(n, self.autoload.get(n, "yes")) for n in matched[offset : offset + limit]]

    # -- theme ----------------------------------------------------------------

    async def get_theme(self) -> ThemeInfo:
        return self.theme

    async def get_premium(self) -> PremiumInfo:
        return self.premium

    async def regenerate_dynamic_css(self) -> bool:
        if not self.dynamic_css_supported:
            return False
        self.dynamic_css_regenerations += 1
        return True

    # -- posts ----------------------------------------------------------------

    async def post_type_exists(self, post_type: str) -> bool:
        return post_type in self.post_types

    async def get_post(self, post_id: int) -> Post | None:
        post = self.posts.get(post_id)
        return copy.copy(post) if post else None

    async def insert_post(
        self, *, post_type: str, title: str, status: str, slug: str = "", content: str = ""
    ) -> int:
        post_id = self._allocate_id()
        now = _now_gmt()
        self.posts[post_id] = Post(
            id=post_id,
            post_type=post_type,
            title=title,
            status=status,
            slug=slug or self._unique_slug(title, post_type),
            content=content,
            date_gmt=now,
            modified_gmt=now,
        )
        self.meta[post_id] = {}
        logger.debug("Inserted post", extra={"post_id": post_id, "post_type": post_type})
        return post_id

    def _unique_slug(self, title: str, post_type: str) -> str:
        base = sanitize_title(title) or str(self._next_id)
        taken = {p.slug for p in self.posts.values() if p.post_type == post_type}
        slug, n = base, 2
        while slug in taken:
            slug = f"{base}-{n}"
            n += 1
        return slug

    async def update_post(self, post_id: int, fields: dict[str, Any]) -> None:
        post = self.posts[post_id]
        for key, value in fields.items():
            setattr(post, key, value)
        post.modified_gmt = _now_gmt()

    async def delete_post(self, post_id: int, force: bool = False) -> bool:
        post = self.posts.get(post_id)
        if post is None:
            return False
        if force:
            del self.posts[post_id]
            self.meta.pop(post_id, None)
        else:
            post.status = "trash"
            post.modified_gmt = _now_gmt()
        return True

    async def query_posts(self, query: PostQuery) -> PostQueryResult:
        def matches(post: Post) -> bool:
            if post.post_type != query.post_type:
                return False
            if query.status == "any":
                if post.status == "trash":
                    return False
            elif post.status != query.status:
                return False
            meta = self.meta.get(post.id, {})
            for key, value in query.meta_equals.items():
                if meta.get(key) != value:
                    return False
            if query.search:
                needle = query.search.lower()
                if needle not in post.title.lower() and needle not in post.content.lower():
                    return False
            return True

        found = [p for p in self.posts.values() if matches(p)]
        attr = _ORDERBY_FIELDS.get(query.orderby, "modified_gmt")
        found.sort(key=lambda p: (getattr(p, attr), p.id), reverse=query.order.upper() == "DESC")

        start = (query.page - 1) * query.per_page
        page = [copy.copy(p) for p in found[start : start + query.per_page]]
        return PostQueryResult(posts=page, total=len(found), per_page=query.per_page)

    # -- post meta ------------------------------------------------------------

    async def get_post_meta(self, post_id: int, key: str) -> Any:
        return copy.deepcopy(self.meta.get(post_id, {}).get(key, ""))

    async def update_post_meta(self, post_id: int, key: str, value: Any) -> None:
        self.meta.setdefault(post_id, {})[key] = copy.deepcopy(value)

    async def delete_post_meta(self, post_id: int, key: str) -> bool:
        return self.meta.get(post_id, {}).pop(key, MISSING) is not MISSING

    # -- uploads --------------------------------------------------------------

    async def uploads_basedir(self) -> str:
        return str(self._uploads_dir)

    async def list_files(self, directory: str, pattern: str) -> list[str]:
        path = Path(directory)
        if not path.is_dir():
            return []
        return sorted(str(p) for p in path.iterdir() if p.is_file() and fnmatch.fnmatch(p.name, pattern))

    async def delete_file(self, path: str) -> bool:
        try:
            os.unlink(path)
        except OSError as e:
            logger.warning("Failed to delete file", extra={"path": path, "error": str(e)})
            return False
        return True
