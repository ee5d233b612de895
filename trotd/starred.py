"""
Best-effort cache of the user's starred repositories.

Hints may be missing or out of date; nothing here ever fails a run.
Refresh errors are logged and the existing hints stay in use.
"""

import asyncio
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from pathlib import Path

from trotd.exceptions import CacheUnavailableError, FetchError
from trotd.logging import get_logger
from trotd.providers.base import StarredCapable
from trotd.storage import read_json, remove_file, utc_now, write_json_atomic
from trotd.types.cache import parse_timestamp
from trotd.types.repos import RepoEntry, RepoId
from trotd.types.seen import StarredRecord

logger = get_logger("store")

DEFAULT_REFRESH_INTERVAL = timedelta(hours=1)


class StarredStatusCache:
    """Persistent repo_id -> starred hint mapping."""

    def __init__(
        self,
        path: Path,
        refresh_interval: timedelta = DEFAULT_REFRESH_INTERVAL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize the starred cache.

        Args:
            path: JSON file holding the hints
            refresh_interval: Minimum time between refreshes of one provider
            clock: Source of the current UTC time
        """
        self.path = Path(path)
        self.refresh_interval = refresh_interval
        self._clock = clock

    def _load(self) -> tuple[dict[RepoId, StarredRecord], dict[str, datetime]]:
        data = read_json(self.path)
        if not isinstance(data, dict):
            return {}, {}
        try:
            records = {
                record.repo_id: record
                for record in (StarredRecord.from_dict(item) for item in data.get("records", []))
            }
            refreshed = {
                provider_id: parse_timestamp(stamp)
                for provider_id, stamp in data.get("refreshed", {}).items()
            }
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Ignoring malformed starred cache %s: %r", self.path, e)
            return {}, {}
        return records, refreshed

    def _save(
        self, records: dict[RepoId, StarredRecord], refreshed: dict[str, datetime]
    ) -> None:
        write_json_atomic(
            self.path,
            {
                "refreshed": {pid: stamp.isoformat() for pid, stamp in refreshed.items()},
                "records": [record.to_dict() for record in records.values()],
            },
        )

    def get(self, repo_id: RepoId) -> bool | None:
        """Cached hint for one repository, or None if never checked."""
        try:
            records, _ = self._load()
        except CacheUnavailableError as e:
            logger.warning("Starred cache unavailable: %s", e)
            return None
        record = records.get(repo_id)
        return record.starred if record else None

    def needs_refresh(self, provider_id: str) -> bool:
        """True when the provider's hints are missing or older than the refresh interval."""
        try:
            _, refreshed = self._load()
        except CacheUnavailableError:
            return True
        stamp = refreshed.get(provider_id)
        return stamp is None or self._clock() - stamp >= self.refresh_interval

    async def refresh(
        self,
        provider: StarredCapable,
        token: str | None,
        repo_ids: Iterable[RepoId] = (),
        budget: float | None = None,
    ) -> dict[RepoId, bool]:
        """
        Re-query the provider for the user's stars.

        Every starred repository is recorded as starred; every id in
        ``repo_ids`` that the provider did not report is recorded as not
        starred. ``budget`` bounds the whole lookup. On any failure, including
        an exceeded budget or an adapter bug, the existing hints are returned
        unchanged.

        Returns:
            Mapping of the requested repo ids to their current hint
        """
        wanted = [rid for rid in repo_ids if rid[0] == provider.provider_id]
        try:
            records, refreshed = await asyncio.to_thread(self._load)
        except CacheUnavailableError as e:
            logger.warning("Starred cache unavailable, refreshing in memory: %s", e)
            records, refreshed = {}, {}

        def existing() -> dict[RepoId, bool]:
            return {rid: records[rid].starred for rid in wanted if rid in records}

        try:
            starred = await asyncio.wait_for(
                provider.fetch_starred(token, budget=budget), timeout=budget
            )
        except FetchError as e:
            logger.warning("Could not refresh %s starred status: %s", provider.provider_id, e)
            return existing()
        except asyncio.TimeoutError:
            logger.warning(
                "%s starred lookup timed out after %ss", provider.provider_id, budget
            )
            return existing()
        except Exception:
            logger.exception("%s starred lookup raised unexpectedly", provider.provider_id)
            return existing()

        now = self._clock()
        for record_id in [rid for rid in records if rid[0] == provider.provider_id]:
            del records[record_id]
        for repo_id in starred:
            records[repo_id] = StarredRecord(repo_id, True, now)
        for repo_id in wanted:
            if repo_id not in starred:
                records[repo_id] = StarredRecord(repo_id, False, now)
        refreshed[provider.provider_id] = now

        try:
            await asyncio.to_thread(self._save, records, refreshed)
        except CacheUnavailableError as e:
            logger.warning("Could not persist starred status: %s", e)

        logger.debug("%s: %d starred repositories", provider.provider_id, len(starred))
        return {rid: rid in starred for rid in wanted}

    def merge_into(self, entries: Iterable[RepoEntry]) -> list[RepoEntry]:
        """Annotate entries from the cached hints; unknown entries are not starred."""
        try:
            records, _ = self._load()
        except CacheUnavailableError as e:
            logger.warning("Starred cache unavailable: %s", e)
            records = {}
        annotated = []
        for entry in entries:
            record = records.get(entry.repo_id)
            annotated.append(entry.with_starred(record.starred if record else False))
        return annotated

    def clear(self) -> None:
        """Invalidate all hints (e.g. after starring a repository)."""
        remove_file(self.path)
