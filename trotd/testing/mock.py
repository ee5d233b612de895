"""
Mock providers for testing.

Provides MockProvider, a scriptable stand-in for a provider adapter that
records every call and never touches the network.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from trotd.providers.base import Provider
from trotd.types.repos import ProviderQuery, RepoEntry, RepoId


@dataclass
class MockCall:
    """Record of a method call."""

    method: str
    args: tuple[Any, ...]
    kwargs: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class FrozenClock:
    """
    Controllable UTC clock for stores and the orchestrator.

    Example:
        ```python
        clock = FrozenClock(datetime(2024, 5, 1, 23, 59, tzinfo=timezone.utc))
        tracker = SeenTracker(path, clock=clock)
        clock.advance(minutes=2)  # now on 2024-05-02
        ```
    """

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        """Move the clock forward by ``timedelta(**kwargs)``."""
        self.now += timedelta(**kwargs)
        return self.now


class MockProvider(Provider):
    """
    Scriptable provider.

    Example:
        ```python
        provider = MockProvider("github", entries=[create_mock_entry("x", "y")])
        provider.configure_fetch(error=NetworkError("boom"))
        provider.configure_fetch(delay=5.0)  # exceeds a 2s budget
        ```
    """

    display_name = "Mock"
    default_base_url = "https://mock.invalid/api"

    def __init__(
        self,
        provider_id: str = "mock",
        entries: list[RepoEntry] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        approximate: bool = False,
    ) -> None:
        # No transport: the mock never performs I/O
        super().__init__(transport=None, base_url=None)  # type: ignore[arg-type]
        self.provider_id = provider_id  # type: ignore[misc]
        self.approximate = approximate  # type: ignore[misc]
        self._entries = list(entries or [])
        self._error = error
        self._delay = delay
        self._calls: list[MockCall] = []

    def configure_fetch(
        self,
        entries: list[RepoEntry] | None = None,
        error: Exception | None = None,
        delay: float | None = None,
    ) -> None:
        """Configure what the next fetch() calls return, raise, or how long they take."""
        if entries is not None:
            self._entries = list(entries)
        self._error = error
        if delay is not None:
            self._delay = delay

    async def fetch(self, query: ProviderQuery) -> list[RepoEntry]:
        """Mock fetch: sleeps for the configured delay, then returns or raises."""
        self._calls.append(MockCall("fetch", (query,), {}))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return [
            self._entry(
                owner=entry.owner,
                name=entry.name,
                url=entry.url,
                stars_total=entry.stars_total,
                language=entry.language,
                stars_today=entry.stars_today,
                description=entry.description,
            )
            for entry in self._entries
        ]

    def was_called(self, method: str = "fetch") -> bool:
        return any(call.method == method for call in self._calls)

    def call_count(self, method: str = "fetch") -> int:
        return sum(1 for call in self._calls if call.method == method)

    def get_calls(self, method: str | None = None) -> list[MockCall]:
        if method is None:
            return list(self._calls)
        return [call for call in self._calls if call.method == method]

    def reset(self) -> None:
        """Forget recorded calls."""
        self._calls.clear()


class MockStarredProvider(MockProvider):
    """MockProvider that can also list the user's starred repositories."""

    def __init__(
        self,
        provider_id: str = "mock",
        entries: list[RepoEntry] | None = None,
        starred: set[tuple[str, str]] | None = None,
        starred_error: Exception | None = None,
        starred_delay: float = 0.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(provider_id, entries, **kwargs)
        self._starred = set(starred or set())
        self._starred_error = starred_error
        self._starred_delay = starred_delay

    def configure_starred(
        self,
        starred: set[tuple[str, str]] | None = None,
        error: Exception | None = None,
        delay: float | None = None,
    ) -> None:
        """Configure the (owner, name) pairs reported as starred, an error, or a delay."""
        if starred is not None:
            self._starred = set(starred)
        self._starred_error = error
        if delay is not None:
            self._starred_delay = delay

    async def fetch_starred(self, token: str | None, budget: float | None = None) -> set[RepoId]:
        self._calls.append(MockCall("fetch_starred", (token,), {"budget": budget}))
        self._require_token(token)
        if self._starred_delay:
            await asyncio.sleep(self._starred_delay)
        if self._starred_error is not None:
            raise self._starred_error
        return {(self.provider_id, owner, name) for owner, name in self._starred}


__all__ = [
    "FrozenClock",
    "MockCall",
    "MockProvider",
    "MockStarredProvider",
]
