"""
Pytest plugin for trotd testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest when this package is installed.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["trotd.testing.conftest"]
"""

# Re-export all fixtures for pytest auto-discovery
from trotd.testing.fixtures import (
    cache_store,
    frozen_clock,
    mock_provider,
    mock_starred_provider,
    sample_entries,
    seen_tracker,
    starred_cache,
    state_dir,
)

__all__ = [
    "frozen_clock",
    "state_dir",
    "cache_store",
    "seen_tracker",
    "starred_cache",
    "sample_entries",
    "mock_provider",
    "mock_starred_provider",
]
