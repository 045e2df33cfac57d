"""WordPress store backends and the process-wide store accessor."""

from __future__ import annotations

from ..core.config import get_settings_instance
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
    WordPressStore,
)
from .memory import InMemoryStore
from .wp_cli import WpCliStore

logger = get_logger(__name__)

_store: WordPressStore | None = None


def create_store() -> WordPressStore:
    """Build the backend named by ``GP_ABILITIES_STORE_BACKEND``."""
    settings = get_settings_instance()
    if settings.store_backend == "wp-cli":
        if not settings.wp_path:
            raise ValueError("GP_ABILITIES_WP_PATH is required for the wp-cli store backend")
        logger.info("Using WP-CLI store", extra={"wp_path": settings.wp_path})
        return WpCliStore(
            wp_path=settings.wp_path,
            wp_cli_path=settings.wp_cli_path,
            timeout=settings.wp_cli_timeout,
            user=settings.wp_cli_user,
        )
    logger.info("Using in-memory store")
    return InMemoryStore(uploads_dir=settings.memory_uploads_dir)


def get_store() -> WordPressStore:
    global _store
    if _store is None:
        _store = create_store()
    return _store


def set_store(store: WordPressStore | None) -> None:
    """Replace the process-wide store; ``None`` rebuilds it from settings on next use."""
    global _store
    _store = store


__all__ = [
    "GP_ELEMENTS_POST_TYPE",
    "MISSING",
    "InMemoryStore",
    "OptionRow",
    "Post",
    "PostQuery",
    "PostQueryResult",
    "PremiumInfo",
    "ThemeInfo",
    "WordPressStore",
    "WpCliStore",
    "create_store",
    "get_store",
    "set_store",
]
