"""pytest configuration for the GeneratePress provider test suite.

Hosts are built over an in-memory store whose uploads tree lives in the
test's ``tmp_path``, with exactly the capabilities the manifest declares.
"""

from __future__ import annotations

import pytest

from gp_abilities.abilities.testing import FakeHostBuilder
from gp_abilities.storage.memory import InMemoryStore

from plugins.generatepress.manifest import PLUGIN_MANIFEST
from plugins.generatepress.plugin import GeneratePressProvider


@pytest.fixture
def provider() -> GeneratePressProvider:
    return GeneratePressProvider()


@pytest.fixture
def builder(tmp_path) -> FakeHostBuilder:
    return (
        FakeHostBuilder(InMemoryStore(uploads_dir=tmp_path))
        .for_provider(PLUGIN_MANIFEST["name"])
        .with_capabilities(*PLUGIN_MANIFEST["capabilities"])
    )
