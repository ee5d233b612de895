"""
Time-to-live cache of provider listings.

One JSON file per fingerprint under ``<state_dir>/cache``. Expired records
are never evicted: they stay readable through ``get_stale`` until the next
successful fetch overwrites them.
"""

import hashlib
import json
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from pathlib import Path

from trotd.logging import get_logger
from trotd.storage import read_json, utc_now, write_json_atomic
from trotd.types.cache import CacheRecord
from trotd.types.repos import ProviderQuery, RepoEntry

logger = get_logger("store")

DEFAULT_TTL = timedelta(minutes=60)


def compute_fingerprint(query: ProviderQuery) -> str:
    """
    Derive the cache key for a query.

    Deterministic over the provider id and the listing-shaping parameters;
    the token and the time budget are not part of it.
    """
    canonical = json.dumps(query.cache_key_params(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class CacheStore:
    """Persistent fingerprint -> CacheRecord store."""

    def __init__(
        self,
        directory: Path,
        default_ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize the cache store.

        Args:
            directory: Directory holding one file per fingerprint
            default_ttl: TTL applied by put() when none is given
            clock: Source of the current UTC time
        """
        self.directory = Path(directory)
        self.default_ttl = default_ttl
        self._clock = clock

    def _path(self, fingerprint: str) -> Path:
        return self.directory / f"{fingerprint}.json"

    def _load(self, fingerprint: str) -> CacheRecord | None:
        data = read_json(self._path(fingerprint))
        if data is None:
            return None
        try:
            record = CacheRecord.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Ignoring malformed cache record %s: %r", fingerprint, e)
            return None
        if record.fingerprint != fingerprint:
            logger.warning("Cache record %s holds fingerprint %s", fingerprint, record.fingerprint)
            return None
        return record

    def get_fresh(self, fingerprint: str) -> CacheRecord | None:
        """Return the record only while ``now < fetched_at + ttl``."""
        record = self._load(fingerprint)
        if record is None or not record.is_fresh(self._clock()):
            return None
        return record

    def get_stale(self, fingerprint: str) -> CacheRecord | None:
        """Return the record regardless of its age."""
        return self._load(fingerprint)

    def put(
        self,
        fingerprint: str,
        payload: Iterable[RepoEntry],
        fetched_at: datetime | None = None,
        ttl: timedelta | None = None,
    ) -> CacheRecord:
        """
        Store a payload, overwriting any prior record for the fingerprint.

        Raises:
            CacheUnavailableError: If the record cannot be written
        """
        record = CacheRecord(
            fingerprint=fingerprint,
            fetched_at=fetched_at or self._clock(),
            ttl=ttl if ttl is not None else self.default_ttl,
            payload=tuple(payload),
        )
        write_json_atomic(self._path(fingerprint), record.to_dict())
        logger.debug("Cached %d entries under %s", len(record.payload), fingerprint[:12])
        return record
