"""
Shared pytest fixtures and path setup for unit tests.
"""

import os
import sys
from pathlib import Path

# Set environment BEFORE any gp_abilities imports so the cached Settings
# instance sees test-only values.
os.environ.setdefault("GP_ABILITIES_ENVIRONMENT", "development")
os.environ.setdefault("GP_ABILITIES_LOG_LEVEL", "DEBUG")
os.environ.setdefault("GP_ABILITIES_STORE_BACKEND", "memory")

# Add backend/src (gp_abilities.*) and the repo root (plugins.*) to sys.path
# so imports work when running pytest from anywhere.
PROJECT_SRC = Path(__file__).resolve().parents[2]
REPO_ROOT = PROJECT_SRC.parents[1]
for p in (PROJECT_SRC, REPO_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

import pytest

from gp_abilities.abilities.testing import ADMIN_CONTEXT
from gp_abilities.core.config import reset_settings_instance
from gp_abilities.storage import InMemoryStore, set_store


@pytest.fixture(autouse=True)
def _fresh_settings_and_store():
    """Every test starts from the environment and a rebuilt store."""
    reset_settings_instance()
    set_store(None)
    yield
    set_store(None)
    reset_settings_instance()


@pytest.fixture
def store(tmp_path):
    """An in-memory store with its uploads tree under ``tmp_path``, installed process-wide."""
    s = InMemoryStore(uploads_dir=tmp_path / "uploads")
    s.uploads_dir.mkdir(parents=True, exist_ok=True)
    set_store(s)
    return s


@pytest.fixture
def admin_context():
    return ADMIN_CONTEXT
