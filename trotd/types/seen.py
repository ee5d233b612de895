"""Seen ledger and starred hint data models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from trotd.types.cache import parse_timestamp
from trotd.types.repos import RepoId


@dataclass
class SeenRecord:
    """Repositories already shown on one calendar day (UTC)."""

    day: date
    repo_ids: set[RepoId] = field(default_factory=set)
    fetch_offsets: dict[str, int] = field(default_factory=dict)  # provider_id -> position

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "repoIds": sorted(list(repo_id) for repo_id in self.repo_ids),
            "fetchOffsets": dict(sorted(self.fetch_offsets.items())),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SeenRecord":
        return cls(
            day=date.fromisoformat(data["day"]),
            repo_ids={
                (str(provider_id), str(owner), str(name))
                for provider_id, owner, name in data.get("repoIds", [])
            },
            fetch_offsets={
                str(provider_id): int(offset)
                for provider_id, offset in data.get("fetchOffsets", {}).items()
            },
        )


@dataclass(frozen=True)
class StarredRecord:
    """Best-effort hint of whether the user starred a repository."""

    repo_id: RepoId
    starred: bool
    checked_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "repoId": list(self.repo_id),
            "starred": self.starred,
            "checkedAt": self.checked_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StarredRecord":
        provider_id, owner, name = data["repoId"]
        return cls(
            repo_id=(provider_id, owner, name),
            starred=bool(data["starred"]),
            checked_at=parse_timestamp(data["checkedAt"]),
        )
