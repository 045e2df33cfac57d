"""Store protocol and value types for the WordPress data layer.

Abilities never talk to WordPress directly; they go through a
``WordPressStore``. Backends implement the protocol over an in-memory model
(tests, development) or a real site via WP-CLI.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


class _Missing:
    """Sentinel type for option lookups that found nothing."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

GP_ELEMENTS_POST_TYPE = "gp_elements"


@dataclass(frozen=True)
class ThemeInfo:
    """Identity of the active theme and its parent."""

    name: str
    version: str
    template: str
    stylesheet: str
    parent_name: str = ""
    parent_version: str = ""
    parent_template: str = ""

    @property
    def is_child(self) -> bool:
        # WordPress only sets a template distinct from the stylesheet for child themes
        return bool(self.template) and self.template != self.stylesheet

    @property
    def is_generatepress(self) -> bool:
        if "generatepress" in (self.template, self.stylesheet):
            return True
        return self.is_child and self.parent_template == "generatepress"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "template": self.template,
            "stylesheet": self.stylesheet,
            "is_child": self.is_child,
            "parent_name": self.parent_name if self.is_child else "",
            "parent_version": self.parent_version if self.is_child else "",
            "is_generatepress": self.is_generatepress,
        }


@dataclass(frozen=True)
class PremiumInfo:
    active: bool = False
    version: str = ""


@dataclass(frozen=True)
class OptionRow:
    option_name: str
    autoload: str = "yes"

    def to_dict(self) -> dict[str, str]:
        return {"option_name": self.option_name, "autoload": self.autoload}


@dataclass
class Post:
    """A row of ``wp_posts``, reduced to the columns abilities read."""

    id: int
    post_type: str
    title: str = ""
    status: str = "publish"
    slug: str = ""
    content: str = ""
    date_gmt: str = ""
    modified_gmt: str = ""
    menu_order: int = 0


@dataclass
class PostQuery:
    """A WP_Query-style lookup.

    ``status`` ``any`` matches every status except ``trash``. ``meta_equals``
    requires each listed meta key to hold exactly the given value.
    """

    post_type: str
    status: str = "any"
    meta_equals: dict[str, Any] = field(default_factory=dict)
    search: str = ""
    per_page: int = 50
    page: int = 1
    orderby: str = "modified"
    order: str = "DESC"


@dataclass
class PostQueryResult:
    posts: list[Post]
    total: int
    per_page: int

    @property
    def pages(self) -> int:
        if self.total <= 0 or self.per_page <= 0:
            return 0
        return math.ceil(self.total / self.per_page)


@runtime_checkable
class WordPressStore(Protocol):
    """Async access to the site's options, posts, post meta and uploads.

    ``get_post_meta`` returns ``""`` for an absent key, like
    ``get_post_meta($id, $key, true)``. ``get_option`` returns ``default``
    (``MISSING`` unless given) for an absent option.
    """

    # Options
    async def get_option(self, name: str, default: Any = MISSING) -> Any: ...

    async def update_option(self, name: str, value: Any) -> None: ...

    async def delete_option(self, name: str) -> bool: ...

    async def list_options(
        self, prefixes: list[str], names: list[str], limit: int, offset: int
    ) -> list[OptionRow]: ...

    # Theme
    async def get_theme(self) -> ThemeInfo: ...

    async def get_premium(self) -> PremiumInfo: ...

    async def regenerate_dynamic_css(self) -> bool: ...

    # Posts
    async def post_type_exists(self, post_type: str) -> bool: ...

    async def get_post(self, post_id: int) -> Post | None: ...

    async def insert_post(
        self, *, post_type: str, title: str, status: str, slug: str = "", content: str = ""
    ) -> int: ...

    async def update_post(self, post_id: int, fields: dict[str, Any]) -> None: ...

    async def delete_post(self, post_id: int, force: bool = False) -> bool: ...

    async def query_posts(self, query: PostQuery) -> PostQueryResult: ...

    # Post meta
    async def get_post_meta(self, post_id: int, key: str) -> Any: ...

    async def update_post_meta(self, post_id: int, key: str, value: Any) -> None: ...

    async def delete_post_meta(self, post_id: int, key: str) -> bool: ...

    # Uploads
    async def uploads_basedir(self) -> str: ...

    async def list_files(self, directory: str, pattern: str) -> list[str]: ...

    async def delete_file(self, path: str) -> bool: ...
