"""
Daily ledger of repositories already shown to the user.

The ledger belongs to one UTC calendar day. A stored record for any other
day is never used: the first access after a day change replaces it with an
empty record for today.
"""

from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime, timezone
from pathlib import Path

from trotd.logging import get_logger
from trotd.storage import read_json, remove_file, utc_now, write_json_atomic
from trotd.types.repos import RepoEntry
from trotd.types.seen import SeenRecord

logger = get_logger("store")


class SeenTracker:
    """Filesystem-backed seen ledger that resets every UTC day."""

    def __init__(self, path: Path, clock: Callable[[], datetime] = utc_now) -> None:
        """
        Initialize the tracker.

        Args:
            path: JSON file holding the ledger
            clock: Source of the current time; converted to UTC for the day
        """
        self.path = Path(path)
        self._clock = clock

    def today(self) -> date:
        return self._clock().astimezone(timezone.utc).date()

    def load(self) -> SeenRecord:
        """
        Return today's record.

        A missing, corrupt or out-of-date record yields an empty record for
        today.

        Raises:
            CacheUnavailableError: If the ledger cannot be read
        """
        today = self.today()
        data = read_json(self.path)
        if data is None:
            return SeenRecord(day=today)
        try:
            record = SeenRecord.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Resetting malformed seen ledger %s: %r", self.path, e)
            return SeenRecord(day=today)
        if record.day != today:
            logger.debug("Seen ledger from %s discarded on %s", record.day, today)
            return SeenRecord(day=today)
        return record

    def filter(self, entries: Iterable[RepoEntry]) -> list[RepoEntry]:
        """Drop entries whose identity is already in today's ledger."""
        seen = self.load().repo_ids
        return [entry for entry in entries if entry.repo_id not in seen]

    def mark_shown(self, entries: Iterable[RepoEntry]) -> SeenRecord:
        """
        Add entries to today's ledger and persist it.

        Raises:
            CacheUnavailableError: If the ledger cannot be written
        """
        record = self.load()
        record.repo_ids.update(entry.repo_id for entry in entries)
        write_json_atomic(self.path, record.to_dict())
        return record

    def fetch_offset(self, provider_id: str) -> int:
        """Position in the provider's trending list where today's next run starts."""
        return self.load().fetch_offsets.get(provider_id, 0)

    def fetch_offsets(self) -> dict[str, int]:
        """Today's positions for every provider that has one."""
        return dict(self.load().fetch_offsets)

    def advance_offsets(self, counts: Mapping[str, int]) -> SeenRecord:
        """
        Move each provider's offset forward by its count and persist the ledger.

        Raises:
            CacheUnavailableError: If the ledger cannot be written
        """
        record = self.load()
        for provider_id, count in counts.items():
            record.fetch_offsets[provider_id] = (
                record.fetch_offsets.get(provider_id, 0) + max(count, 0)
            )
        write_json_atomic(self.path, record.to_dict())
        return record

    def clear(self) -> None:
        """Forget everything recorded today."""
        remove_file(self.path)
