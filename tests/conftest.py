"""Configure pytest environment for all tests."""

import logging

import pytest

from peephole.core.config import reset_config
from peephole.core.resolver import reset_type_cache

logger = logging.getLogger(__name__)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "config: tests that load configuration from files or env")


@pytest.fixture(autouse=True)
def _fresh_state(monkeypatch):
    """Give every test default configuration and an empty type cache."""
    for name in ("PEEPHOLE_CONFIG", "PEEPHOLE_RESOLVER_AUTO_IMPORT", "PEEPHOLE_RESOLVER_CACHE_ENABLED"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    reset_type_cache()
    yield
    reset_config()
    reset_type_cache()

