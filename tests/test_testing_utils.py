"""
Tests for trotd testing utilities.

Verifies that MockProvider, FrozenClock and fixtures work correctly.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from trotd.exceptions import AuthRequiredError, NetworkError
from trotd.providers import StarredCapable
from trotd.testing import FrozenClock, MockProvider, MockStarredProvider, create_mock_entry
from trotd.types.repos import ProviderQuery

QUERY = ProviderQuery("github", "https://api.github.com")


class TestMockProvider:
    """Tests for MockProvider."""

    def test_default_returns_nothing(self) -> None:
        provider = MockProvider()

        assert asyncio.run(provider.fetch(QUERY)) == []
        assert provider.was_called()
        assert provider.call_count() == 1

    def test_entries_restamped_with_provider(self) -> None:
        provider = MockProvider("gitea", entries=[create_mock_entry("a", "b")], approximate=True)

        entries = asyncio.run(provider.fetch(QUERY))

        assert entries[0].provider_id == "gitea"
        assert entries[0].approximate
        assert entries[0].full_name == "a/b"

    def test_configured_errors(self) -> None:
        provider = MockProvider()
        provider.configure_fetch(error=NetworkError("down"))

        with pytest.raises(NetworkError):
            asyncio.run(provider.fetch(QUERY))

        provider.configure_fetch(entries=[create_mock_entry()])
        assert len(asyncio.run(provider.fetch(QUERY))) == 1

    def test_call_recording(self) -> None:
        provider = MockProvider()
        asyncio.run(provider.fetch(QUERY))

        calls = provider.get_calls("fetch")
        assert len(calls) == 1
        assert calls[0].args[0] is QUERY

        provider.reset()
        assert not provider.was_called()

    def test_fixture(self, mock_provider: MockProvider, sample_entries) -> None:
        entries = asyncio.run(mock_provider.fetch(QUERY))
        assert entries == sample_entries

    def test_not_starred_capable(self) -> None:
        assert not isinstance(MockProvider(), StarredCapable)


class TestMockStarredProvider:
    """Tests for MockStarredProvider."""

    def test_reports_starred(self) -> None:
        provider = MockStarredProvider("gitea", starred={("a", "b")})

        assert isinstance(provider, StarredCapable)
        assert asyncio.run(provider.fetch_starred("token")) == {("gitea", "a", "b")}

    def test_requires_token(self) -> None:
        provider = MockStarredProvider()

        with pytest.raises(AuthRequiredError):
            asyncio.run(provider.fetch_starred(None))
        assert provider.call_count("fetch_starred") == 1


class TestFrozenClock:
    """Tests for FrozenClock."""

    def test_advance(self) -> None:
        clock = FrozenClock(datetime(2024, 5, 1, 23, 59, tzinfo=timezone.utc))

        clock.advance(minutes=2)

        assert clock() == datetime(2024, 5, 2, 0, 1, tzinfo=timezone.utc)

    def test_fixture_default(self, frozen_clock: FrozenClock) -> None:
        assert frozen_clock().tzinfo is timezone.utc


def test_create_mock_entry_defaults() -> None:
    entry = create_mock_entry()

    assert entry.provider_id == "github"
    assert entry.full_name == "octocat/hello-world"
    assert entry.url == "https://github.example/octocat/hello-world"
