"""Test scaffolding for ability providers.

:class:`FakeHostBuilder` seeds an :class:`InMemoryStore` fluently and builds a
real request-scoped ``Host`` over it, so provider tests exercise the same
capability objects the executor hands out::

    builder = FakeHostBuilder().with_option("generate_settings", {"text_color": "#222"})
    host = builder.build()
    result = await provider.get_settings({}, CTX, host)
    assert builder.store.options["generate_settings"] == {...}
"""

from __future__ import annotations

from typing import Any

from ..storage.base import PremiumInfo, ThemeInfo
from ..storage.memory import InMemoryStore
from .base import ExecuteContext
from .host import KNOWN_CAPABILITIES, Host, make_host

ADMIN_CONTEXT = ExecuteContext(
    user_id="test_user",
    capabilities=frozenset({"edit_theme_options", "manage_options"}),
)


class FakeHostBuilder:
    """Fluent builder for an in-memory store plus the host that wraps it."""

    def __init__(self, store: InMemoryStore | None = None) -> None:
        self.store = store or InMemoryStore()
        self._capabilities: list[str] = sorted(KNOWN_CAPABILITIES)
        self._provider = "test"
        self.last_post_id: int | None = None

    def with_theme(
        self,
        stylesheet: str,
        template: str | None = None,
        *,
        name: str = "",
        version: str = "1.0.0",
        parent_name: str = "",
        parent_version: str = "",
    ) -> FakeHostBuilder:
        """Activate a theme; pass ``template`` to make it a child theme."""
        template = template or stylesheet
        self.store.theme = ThemeInfo(
            name=name or stylesheet.title(),
            version=version,
            template=template,
            stylesheet=stylesheet,
            parent_name=parent_name,
            parent_version=parent_version,
            parent_template=template if template != stylesheet else "",
        )
        return self

    def with_premium(self, version: str = "2.5.0") -> FakeHostBuilder:
        self.store.premium = PremiumInfo(active=True, version=version)
        return self

    def with_option(self, name: str, value: Any, autoload: str = "yes") -> FakeHostBuilder:
        self.store.seed_option(name, value, autoload)
        return self

    def with_post(
        self, post_type: str = "page", title: str = "", meta: dict[str, Any] | None = None, **fields: Any
    ) -> FakeHostBuilder:
        """Add a post; its id is available as ``builder.last_post_id``."""
        self.last_post_id = self.store.seed_post(post_type, title, meta, **fields)
        return self

    def with_element(self, title: str, meta: dict[str, Any] | None = None, **fields: Any) -> FakeHostBuilder:
        return self.with_post("gp_elements", title, meta, **fields)

    def without_post_type(self, post_type: str) -> FakeHostBuilder:
        self.store.post_types.discard(post_type)
        return self

    def with_css_file(self, filename: str, subdir: str = "generateblocks", body: str = "") -> FakeHostBuilder:
        directory = self.store.uploads_dir / subdir
        directory.mkdir(parents=True, exist_ok=True)
        (directory / filename).write_text(body, encoding="utf-8")
        return self

    def with_capabilities(self, *capabilities: str) -> FakeHostBuilder:
        self._capabilities = list(capabilities)
        return self

    def for_provider(self, provider: str) -> FakeHostBuilder:
        self._provider = provider
        return self

    def build(self) -> Host:
        return make_host(
            provider=self._provider,
            user_id=ADMIN_CONTEXT.user_id,
            store=self.store,
            capabilities=self._capabilities,
        )
