"""Unit tests for store backend selection."""

import pytest

from gp_abilities.storage import InMemoryStore, WpCliStore, create_store, get_store, set_store


def test_memory_backend_by_default(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("GP_ABILITIES_MEMORY_UPLOADS_DIR", str(tmp_path))
    store = create_store()
    assert isinstance(store, InMemoryStore)
    assert store.uploads_dir == tmp_path


def test_wp_cli_backend(monkeypatch) -> None:
    monkeypatch.setenv("GP_ABILITIES_STORE_BACKEND", "wp-cli")
    monkeypatch.setenv("GP_ABILITIES_WP_PATH", "/var/www/site")
    monkeypatch.setenv("GP_ABILITIES_WP_CLI_TIMEOUT", "12.5")
    store = create_store()
    assert isinstance(store, WpCliStore)
    assert store.wp_path == "/var/www/site"
    assert store.timeout == 12.5


def test_wp_cli_backend_requires_path(monkeypatch) -> None:
    monkeypatch.setenv("GP_ABILITIES_STORE_BACKEND", "wp-cli")
    monkeypatch.delenv("GP_ABILITIES_WP_PATH", raising=False)
    with pytest.raises(ValueError, match="GP_ABILITIES_WP_PATH"):
        create_store()


def test_get_store_is_cached_until_replaced(tmp_path) -> None:
    first = get_store()
    assert get_store() is first

    replacement = InMemoryStore(uploads_dir=tmp_path)
    set_store(replacement)
    assert get_store() is replacement
