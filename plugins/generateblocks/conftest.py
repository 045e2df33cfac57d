"""pytest configuration for the GenerateBlocks provider test suite."""

from __future__ import annotations

import pytest

from gp_abilities.abilities.testing import FakeHostBuilder
from gp_abilities.storage.memory import InMemoryStore

from plugins.generateblocks.manifest import PLUGIN_MANIFEST
from plugins.generateblocks.plugin import GenerateBlocksProvider


@pytest.fixture
def provider() -> GenerateBlocksProvider:
    return GenerateBlocksProvider()


@pytest.fixture
def builder(tmp_path) -> FakeHostBuilder:
    return (
        FakeHostBuilder(InMemoryStore(uploads_dir=tmp_path))
        .for_provider(PLUGIN_MANIFEST["name"])
        .with_capabilities(*PLUGIN_MANIFEST["capabilities"])
    )
