"""
Pytest fixtures for trotd testing.

Provides stores rooted in a temporary state directory, a controllable
clock and sample listings.
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from trotd.cache import CacheStore
from trotd.seen import SeenTracker
from trotd.starred import StarredStatusCache
from trotd.testing.mock import FrozenClock, MockProvider, MockStarredProvider
from trotd.types.repos import RepoEntry


# ============================================================================
# Clock and state directory
# ============================================================================


@pytest.fixture
def frozen_clock() -> FrozenClock:
    """
    Provide a clock fixed at 2024-01-01 12:00 UTC.

    Example:
        ```python
        def test_ttl(cache_store, frozen_clock):
            cache_store.put("fp", [])
            frozen_clock.advance(hours=2)
            assert cache_store.get_fresh("fp") is None
        ```
    """
    return FrozenClock()


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    """Provide an empty state directory."""
    path = tmp_path / "state"
    path.mkdir()
    return path


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def cache_store(state_dir: Path, frozen_clock: FrozenClock) -> CacheStore:
    """Provide a CacheStore driven by the frozen clock."""
    return CacheStore(state_dir / "cache", clock=frozen_clock)


@pytest.fixture
def seen_tracker(state_dir: Path, frozen_clock: FrozenClock) -> SeenTracker:
    """Provide a SeenTracker driven by the frozen clock."""
    return SeenTracker(state_dir / "seen.json", clock=frozen_clock)


@pytest.fixture
def starred_cache(state_dir: Path, frozen_clock: FrozenClock) -> StarredStatusCache:
    """Provide a StarredStatusCache driven by the frozen clock."""
    return StarredStatusCache(state_dir / "starred.json", clock=frozen_clock)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_entries() -> list[RepoEntry]:
    """Provide three GitHub listings ordered by stars."""
    return [
        create_mock_entry("rust-lang", "rust", stars_total=300, language="Rust"),
        create_mock_entry("python", "cpython", stars_total=200, language="Python"),
        create_mock_entry("golang", "go", stars_total=100, language="Go"),
    ]


@pytest.fixture
def mock_provider(sample_entries: list[RepoEntry]) -> Generator[MockProvider, None, None]:
    """
    Provide a MockProvider returning the sample entries.

    Example:
        ```python
        def test_fetch(mock_provider):
            mock_provider.configure_fetch(error=NetworkError("down"))
            ...
            assert mock_provider.call_count() == 1
        ```
    """
    provider = MockProvider("github", entries=sample_entries)
    yield provider
    provider.reset()


@pytest.fixture
def mock_starred_provider(
    sample_entries: list[RepoEntry],
) -> Generator[MockStarredProvider, None, None]:
    """Provide a starred-capable MockProvider that reports rust-lang/rust as starred."""
    provider = MockStarredProvider(
        "github", entries=sample_entries, starred={("rust-lang", "rust")}
    )
    yield provider
    provider.reset()


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_entry(
    owner: str = "octocat",
    name: str = "hello-world",
    provider_id: str = "github",
    stars_total: int = 10,
    language: str | None = None,
    description: str | None = None,
    stars_today: int | None = None,
    approximate: bool = False,
    url: str | None = None,
) -> RepoEntry:
    """
    Create a RepoEntry with sensible defaults.

    Example:
        ```python
        entry = create_mock_entry("rust-lang", "rust", stars_total=9000)
        ```
    """
    return RepoEntry(
        provider_id=provider_id,
        owner=owner,
        name=name,
        url=url or f"https://{provider_id}.example/{owner}/{name}",
        stars_total=stars_total,
        language=language,
        stars_today=stars_today,
        description=description,
        approximate=approximate,
    )
