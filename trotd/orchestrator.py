"""
Fetch orchestration.

Fans out one task per provider, bounds each with its own time budget and the
whole fan-out with a global timeout, falls back to stale cache records on
failure, and hands the merged listing to the seen ledger and the starred
cache before returning it.
"""

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, TypeVar

from trotd.cache import DEFAULT_TTL, CacheStore, compute_fingerprint
from trotd.exceptions import (
    CacheUnavailableError,
    FailureKind,
    FetchError,
    FetchTimeoutError,
)
from trotd.logging import get_logger, log_provider_outcome
from trotd.providers.base import Provider, StarredCapable
from trotd.seen import SeenTracker
from trotd.starred import StarredStatusCache
from trotd.storage import utc_now
from trotd.types.repos import ProviderQuery, RepoEntry
from trotd.types.results import ProviderResult, RunReport

logger = get_logger("orchestrator")

T = TypeVar("T")

NAME_ASCII_RATIO = 0.8
DESCRIPTION_ASCII_RATIO = 0.7


@dataclass(frozen=True)
class RunOptions:
    """Per-run switches supplied by the caller."""

    show_all: bool = False  # bypass the seen filter
    no_cache: bool = False  # bypass the cache store entirely
    annotate_starred: bool = False
    # Whether show-all runs still record what they displayed as seen
    mark_seen_on_show_all: bool = False
    # Start each provider at its ledger offset for today and advance it afterwards
    paginate: bool = False
    cache_ttl: timedelta = DEFAULT_TTL
    min_stars: int | None = None
    ascii_only: bool = False
    slow_warning_after: float | None = 10.0


def ascii_ratio(text: str) -> float:
    if not text:
        return 1.0
    return sum(1 for char in text if char.isascii()) / len(text)


def is_mostly_ascii(entry: RepoEntry) -> bool:
    """Filter for listings written primarily in Latin script."""
    if ascii_ratio(entry.name) < NAME_ASCII_RATIO:
        return False
    if entry.description and ascii_ratio(entry.description) < DESCRIPTION_ASCII_RATIO:
        return False
    return True


class Orchestrator:
    """
    Drives one trending run across all enabled providers.

    Stores are explicit handles; pass None to run without a cache, seen
    ledger or starred cache.
    """

    def __init__(
        self,
        providers: Mapping[str, Provider],
        cache: CacheStore | None = None,
        seen: SeenTracker | None = None,
        starred: StarredStatusCache | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.providers = dict(providers)
        self.cache = cache
        self.seen = seen
        self.starred = starred
        self._clock = clock

    async def run(
        self,
        queries: Mapping[str, ProviderQuery],
        global_timeout: float,
        options: RunOptions | None = None,
    ) -> RunReport:
        """
        Fetch, merge, filter and annotate trending listings.

        Provider failures never raise: they become ProviderResult outcomes.
        An empty report with ``exhausted`` set means no provider produced
        anything and no stale cache existed; the caller decides whether
        that is an error.

        Args:
            queries: Fully resolved query per enabled provider id, in display order
            global_timeout: Seconds allowed for the fan-out and any starred refresh after it
            options: Run switches (default: RunOptions())

        Returns:
            RunReport with final entries and per-provider diagnostics
        """
        options = options or RunOptions()
        warnings: list[str] = []
        use_cache = self.cache is not None and not options.no_cache
        filtering = self.seen is not None and not options.show_all
        paginating = options.paginate and filtering
        loop = asyncio.get_running_loop()
        deadline = loop.time() + global_timeout

        base_queries = dict(queries)
        if paginating:
            offsets = await self._seen_call(self.seen.fetch_offsets, warnings, default={})
            if offsets:
                logger.info("Resuming trending lists at positions %s", offsets)
                queries = {
                    pid: replace(q, offset=q.offset + offsets.get(pid, 0))
                    for pid, q in queries.items()
                }

        results = await self._fan_out(queries, base_queries, global_timeout, options, use_cache)

        merged: list[RepoEntry] = []
        for provider_id in queries:
            merged.extend(results[provider_id].entries)

        entries = list(merged)
        if filtering:
            entries = await self._seen_call(self.seen.filter, warnings, entries, default=entries)
            removed = len(merged) - len(entries)
            if removed:
                logger.info("Seen filter: skipped %d repos shown earlier today", removed)

        if options.ascii_only:
            entries = [entry for entry in entries if is_mostly_ascii(entry)]
        if options.min_stars is not None:
            entries = [entry for entry in entries if entry.stars_total >= options.min_stars]

        if options.annotate_starred and self.starred is not None:
            entries = await self._annotate_starred(entries, queries, deadline)

        if self.seen is not None and entries and (filtering or options.mark_seen_on_show_all):
            await self._seen_call(self.seen.mark_shown, warnings, entries, default=None)

        if paginating:
            # Stale listings may come from another position, so only successes move it
            advanced = {
                pid: len(result.entries)
                for pid, result in results.items()
                if result.is_success and result.entries
            }
            if advanced:
                await self._seen_call(self.seen.advance_offsets, warnings, advanced, default=None)

        report = RunReport(entries=entries, merged=merged, results=results, warnings=warnings)
        if report.exhausted:
            logger.warning("All providers failed: %s", report.failure_reasons())
        return report

    async def _fan_out(
        self,
        queries: Mapping[str, ProviderQuery],
        base_queries: Mapping[str, ProviderQuery],
        global_timeout: float,
        options: RunOptions,
        use_cache: bool,
    ) -> dict[str, ProviderResult]:
        tasks: dict[str, asyncio.Task[ProviderResult]] = {}
        for provider_id, query in queries.items():
            provider = self.providers.get(provider_id)
            if provider is None:
                logger.warning("No provider registered for %s", provider_id)
                continue
            tasks[provider_id] = asyncio.create_task(
                self._run_provider(
                    provider_id, provider, query, base_queries[provider_id], options, use_cache
                ),
                name=f"trotd-fetch-{provider_id}",
            )

        if tasks:
            _, pending = await asyncio.wait(tasks.values(), timeout=global_timeout)
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        results: dict[str, ProviderResult] = {}
        for provider_id in queries:
            task = tasks.get(provider_id)
            if task is None:
                result = ProviderResult.empty(
                    provider_id, FailureKind.NETWORK, "provider not available"
                )
            elif task.cancelled():
                result = ProviderResult.empty(
                    provider_id,
                    FailureKind.TIMEOUT,
                    f"global timeout of {global_timeout}s elapsed",
                )
            else:
                result = task.result()
            log_provider_outcome(result)
            results[provider_id] = result
        return results

    async def _run_provider(
        self,
        provider_id: str,
        provider: Provider,
        query: ProviderQuery,
        base_query: ProviderQuery,
        options: RunOptions,
        use_cache: bool,
    ) -> ProviderResult:
        fingerprint = compute_fingerprint(query)

        if use_cache:
            fresh = await self._cache_call(self.cache.get_fresh, fingerprint)
            if fresh is not None:
                return ProviderResult.success(provider_id, fresh.payload, from_cache=True)

        slow_notice = None
        if options.slow_warning_after is not None:
            slow_notice = asyncio.get_running_loop().call_later(
                options.slow_warning_after,
                logger.warning,
                "Still fetching %s...",
                provider_id,
            )
        try:
            entries = await asyncio.wait_for(provider.fetch(query), timeout=query.timeout)
        except asyncio.TimeoutError:
            failure: FetchError = FetchTimeoutError(
                f"{provider_id} provider timed out after {query.timeout}s", provider_id
            )
        except FetchError as e:
            failure = e
        except Exception as e:
            # Adapter bugs stay confined to their own outcome
            logger.exception("%s provider raised unexpectedly", provider_id)
            failure = FetchError(f"unexpected {type(e).__name__}: {e}", provider_id)
        else:
            if use_cache:
                await self._cache_call(
                    self.cache.put, fingerprint, entries, self._clock(), options.cache_ttl
                )
            return ProviderResult.success(provider_id, entries)
        finally:
            if slow_notice is not None:
                slow_notice.cancel()

        if use_cache:
            record = await self._cache_call(self.cache.get_stale, fingerprint)
            if record is None and base_query != query:
                # Nothing stored at today's position; fall back to the top of the list
                record = await self._cache_call(
                    self.cache.get_stale, compute_fingerprint(base_query)
                )
            if record is not None:
                return ProviderResult.stale(
                    provider_id,
                    record.payload,
                    age=record.age(self._clock()),
                    reason=failure.kind,
                    detail=failure.message,
                )
        return ProviderResult.empty(provider_id, failure.kind, failure.message)

    async def _cache_call(self, method: Callable[..., T], *args: Any) -> T | None:
        """Run a cache operation off the event loop; storage errors disable caching for the call."""
        try:
            return await asyncio.to_thread(method, *args)
        except CacheUnavailableError as e:
            logger.warning("Cache unavailable: %s", e)
            return None

    async def _seen_call(
        self, method: Callable[..., T], warnings: list[str], *args: Any, default: Any
    ) -> Any:
        try:
            return await asyncio.to_thread(method, *args)
        except CacheUnavailableError as e:
            warnings.append(f"seen tracking skipped: {e.message}")
            logger.warning("Seen ledger unavailable: %s", e)
            return default

    async def _annotate_starred(
        self,
        entries: list[RepoEntry],
        queries: Mapping[str, ProviderQuery],
        deadline: float,
    ) -> list[RepoEntry]:
        # Refreshes run one at a time: they share a single hints file
        loop = asyncio.get_running_loop()
        for provider_id, query in queries.items():
            provider = self.providers.get(provider_id)
            if not isinstance(provider, StarredCapable):
                continue
            if not query.token:
                logger.debug("Skipping %s starred status: no token configured", provider_id)
                continue
            if not await asyncio.to_thread(self.starred.needs_refresh, provider_id):
                continue
            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.warning(
                    "Skipping %s starred refresh: global timeout already spent", provider_id
                )
                continue
            await self.starred.refresh(
                provider,
                query.token,
                [entry.repo_id for entry in entries if entry.provider_id == provider_id],
                budget=min(query.timeout, remaining),
            )
        return await asyncio.to_thread(self.starred.merge_into, entries)
