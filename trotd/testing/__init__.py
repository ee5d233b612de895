"""trotd testing utilities.

Provides mock providers, a controllable clock and fixtures for testing
code that runs the trending orchestrator.
"""

from trotd.testing.fixtures import create_mock_entry
from trotd.testing.mock import FrozenClock, MockCall, MockProvider, MockStarredProvider

__all__ = [
    # Mock providers
    "MockProvider",
    "MockStarredProvider",
    "MockCall",
    "FrozenClock",
    # Helper functions
    "create_mock_entry",
]
