"""
trotd async client.

The single entry point used by the presentation layer: it owns the HTTP
transport, opens the persistent stores under the state directory and runs
the orchestrator.
"""

from collections.abc import Iterable
from dataclasses import replace
from typing import Any

import httpx

from trotd.cache import CacheStore
from trotd.config import Settings
from trotd.logging import get_logger
from trotd.orchestrator import Orchestrator, RunOptions
from trotd.providers import create_provider, resolve_provider_id
from trotd.seen import SeenTracker
from trotd.starred import StarredStatusCache
from trotd.transport import AsyncHTTPTransport, RetryConfig
from trotd.types.results import RunReport

logger = get_logger()

CACHE_SUBDIR = "cache"
SEEN_FILE = "seen.json"
STARRED_FILE = "starred.json"


class AsyncTrotdClient:
    """
    Async client for fetching today's trending repositories.

    Example:
        ```python
        import asyncio
        from trotd import AsyncTrotdClient

        async def main():
            async with AsyncTrotdClient.from_env() as client:
                report = await client.trending(languages=["rust"])
                for entry in report.entries:
                    print(entry.full_name, entry.stars_total)
                for provider_id, reason in report.failure_reasons().items():
                    print(f"warning: {provider_id}: {reason}")

        asyncio.run(main())
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Resolved settings (default: Settings())
            retry_config: Configuration for provider retry behavior (optional)
            http_transport: Optional httpx transport, mainly for tests
        """
        self.settings = settings or Settings()

        self._transport = AsyncHTTPTransport(
            timeout=self.settings.timeout_secs,
            retry_config=retry_config,
            http_transport=http_transport,
        )
        self.providers = {
            provider_id: create_provider(
                provider_id, self._transport, self.settings.base_urls.get(provider_id)
            )
            for provider_id in self.settings.providers
        }

        state_dir = self.settings.state_dir
        self.cache = CacheStore(state_dir / CACHE_SUBDIR, default_ttl=self.settings.cache_ttl)
        self.seen = SeenTracker(state_dir / SEEN_FILE)
        self.starred = StarredStatusCache(state_dir / STARRED_FILE)
        self.orchestrator = Orchestrator(
            self.providers,
            cache=self.cache,
            seen=self.seen,
            starred=self.starred,
        )

    @classmethod
    def from_env(
        cls,
        retry_config: RetryConfig | None = None,
    ) -> "AsyncTrotdClient":
        """
        Create a client from ``TROTD_*`` environment variables.

        Raises:
            ConfigurationError: If a variable is malformed
        """
        return cls(settings=Settings.from_env(), retry_config=retry_config)

    async def trending(
        self,
        providers: Iterable[str] | None = None,
        languages: Iterable[str] | None = None,
        max_per_provider: int | None = None,
        min_stars: int | None = None,
        show_all: bool = False,
        no_cache: bool = False,
        show_starred: bool | None = None,
        mark_seen_on_show_all: bool = False,
        paginate: bool = True,
        global_timeout: float | None = None,
    ) -> RunReport:
        """
        Fetch today's trending repositories.

        Arguments left as None fall back to the client's settings.

        Args:
            providers: Subset of enabled providers (names or aliases)
            languages: Language filter override
            max_per_provider: Result cap override
            min_stars: Minimum star threshold override
            show_all: Include repositories already shown today
            no_cache: Bypass the cache for reads and writes
            show_starred: Annotate entries the user starred
            mark_seen_on_show_all: Record show-all output in today's ledger
            paginate: Continue each provider from where earlier runs stopped today
                (ignored by show-all runs)
            global_timeout: Budget for the whole run in seconds

        Returns:
            RunReport with the final entries and per-provider diagnostics
        """
        settings = self.settings
        overrides: dict[str, Any] = {}
        if languages is not None:
            overrides["languages"] = tuple(languages)
        if max_per_provider is not None:
            overrides["max_results"] = max_per_provider
        if min_stars is not None:
            overrides["min_stars"] = min_stars

        selected = (
            [resolve_provider_id(name) for name in providers]
            if providers is not None
            else list(settings.providers)
        )
        enabled = settings.queries()
        queries = {}
        for provider_id in selected:
            if provider_id not in enabled:
                logger.warning("Provider %s is not enabled", provider_id)
                continue
            queries[provider_id] = replace(enabled[provider_id], **overrides)

        options = RunOptions(
            show_all=show_all,
            no_cache=no_cache,
            annotate_starred=settings.show_starred if show_starred is None else show_starred,
            mark_seen_on_show_all=mark_seen_on_show_all,
            paginate=paginate,
            cache_ttl=settings.cache_ttl,
            min_stars=min_stars if min_stars is not None else settings.min_stars,
            ascii_only=settings.ascii_only,
        )
        return await self.orchestrator.run(
            queries,
            global_timeout if global_timeout is not None else settings.global_timeout_secs,
            options,
        )

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying async HTTP transport (for advanced use cases)."""
        return self._transport

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> "AsyncTrotdClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit - closes the client."""
        await self.close()
