from __future__ import annotations

from typing import Any

from ...storage.base import WordPressStore
from .exceptions import CapabilityDenied
from .files_capability import FilesCapability
from .log_capability import LogCapability
from .options_capability import OptionsCapability
from .posts_capability import PostsCapability
from .theme_capability import ThemeCapability

KNOWN_CAPABILITIES = frozenset(("options", "posts", "theme", "files"))


class Host:
    """Request-scoped host exposing only the capabilities a provider declared.

    Immutable after construction so handlers cannot swap capabilities or add
    undeclared ones.
    """

    __slots__ = (
        "_declared_caps",
        "_frozen",
        "files",
        "log",
        "options",
        "posts",
        "theme",
    )

    # Capability names that require declaration before access
    _CAP_NAMES = KNOWN_CAPABILITIES

    def __init__(self, declared_caps: list[str] | None = None) -> None:
        object.__setattr__(self, "_declared_caps", set(declared_caps or []))
        object.__setattr__(self, "_frozen", False)
        for cap in ("options", "posts", "theme", "files", "log"):
            object.__setattr__(self, cap, None)

    def _freeze(self) -> None:
        object.__setattr__(self, "_frozen", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError("Host attributes are immutable after construction")
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        raise AttributeError("Host attributes cannot be deleted")

    def __getattribute__(self, name: str) -> Any:
        if name in Host._CAP_NAMES:
            declared = object.__getattribute__(self, "_declared_caps")
            if name not in declared:
                raise CapabilityDenied(name)
        return object.__getattribute__(self, name)


def make_host(
    *,
    provider: str,
    user_id: str,
    store: WordPressStore,
    capabilities: list[str] | None = None,
    ability: str | None = None,
) -> Host:
    """Build the host for one ability call.

    A fresh ``ThemeCapability`` is created per call; ``options`` shares it so
    allow-list checks and theme reads agree within the call.
    """
    caps = set(capabilities or [])
    # options needs the theme identity for theme_mods_* names
    if "options" in caps:
        caps.add("theme")

    h = Host(declared_caps=list(caps))

    theme = ThemeCapability(store=store)
    if "theme" in caps:
        h.theme = theme
    if "options" in caps:
        h.options = OptionsCapability(store=store, theme=theme)
    if "posts" in caps:
        h.posts = PostsCapability(store=store)
    if "files" in caps:
        h.files = FilesCapability(store=store)

    h.log = LogCapability(provider=provider, user_id=user_id, ability=ability)

    h._freeze()
    return h
