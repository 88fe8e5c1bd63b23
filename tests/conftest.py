"""Minimal test fixtures - just what we actually need."""

import pytest

from cwtail.backends.memory import InMemoryBackend
from tests.fixtures.clock import FakeClock


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path, monkeypatch):
    """Keep tests away from the user's config file and the network."""
    config_home = tmp_path / "config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("CWTAIL_NO_UPDATE_CHECK", "1")
    yield config_home


@pytest.fixture
def clock():
    """Virtual clock starting at 2024-01-01T00:00:00Z."""
    return FakeClock()


@pytest.fixture
def backend():
    """Empty in-memory backend."""
    return InMemoryBackend()
