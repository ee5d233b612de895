"""Cache record data model."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from trotd.types.repos import RepoEntry


def parse_timestamp(value: str) -> datetime:
    """
    Parse a persisted ISO-8601 timestamp.

    Raises:
        ValueError: If the value is malformed or carries no UTC offset
    """
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp without UTC offset: {value!r}")
    return parsed


@dataclass(frozen=True)
class CacheRecord:
    """A timestamped provider payload stored under a fingerprint."""

    fingerprint: str
    fetched_at: datetime  # timezone-aware, UTC
    ttl: timedelta
    payload: tuple[RepoEntry, ...]

    @property
    def expires_at(self) -> datetime:
        return self.fetched_at + self.ttl

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at

    def age(self, now: datetime) -> timedelta:
        return max(now - self.fetched_at, timedelta(0))

    def to_dict(self) -> dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "fetchedAt": self.fetched_at.isoformat(),
            "ttlSeconds": self.ttl.total_seconds(),
            "payload": [entry.to_dict() for entry in self.payload],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheRecord":
        return cls(
            fingerprint=data["fingerprint"],
            fetched_at=parse_timestamp(data["fetchedAt"]),
            ttl=timedelta(seconds=float(data["ttlSeconds"])),
            payload=tuple(RepoEntry.from_dict(item) for item in data["payload"]),
        )
