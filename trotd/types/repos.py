"""Repository listing data models."""

from dataclasses import dataclass, field, replace
from typing import Any

# (provider_id, owner, name)
RepoId = tuple[str, str, str]


@dataclass(frozen=True)
class RepoEntry:
    """
    One trending repository as reported by a provider.

    Identity is ``(provider_id, owner, name)``, compared case-sensitively.
    ``starred`` and ``stale`` are annotations applied after the fetch and
    take no part in identity.
    """

    provider_id: str
    owner: str
    name: str
    url: str
    stars_total: int = 0
    language: str | None = None
    stars_today: int | None = None
    description: str | None = None
    approximate: bool = False
    starred: bool = field(default=False, compare=False)
    stale: bool = field(default=False, compare=False)

    @property
    def repo_id(self) -> RepoId:
        return (self.provider_id, self.owner, self.name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def with_starred(self, starred: bool) -> "RepoEntry":
        """Return a copy carrying the given starred annotation."""
        if starred == self.starred:
            return self
        return replace(self, starred=starred)

    def as_stale(self) -> "RepoEntry":
        """Return a copy flagged as coming from a stale cache record."""
        return replace(self, stale=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the listing fields (annotations are not persisted)."""
        return {
            "providerId": self.provider_id,
            "owner": self.owner,
            "name": self.name,
            "url": self.url,
            "starsTotal": self.stars_total,
            "language": self.language,
            "starsToday": self.stars_today,
            "description": self.description,
            "approximate": self.approximate,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RepoEntry":
        return cls(
            provider_id=data["providerId"],
            owner=data["owner"],
            name=data["name"],
            url=data["url"],
            stars_total=int(data.get("starsTotal") or 0),
            language=data.get("language"),
            stars_today=data.get("starsToday"),
            description=data.get("description"),
            approximate=bool(data.get("approximate", False)),
        )


@dataclass(frozen=True)
class ProviderQuery:
    """Fully resolved configuration handed to one provider."""

    provider_id: str
    base_url: str
    languages: tuple[str, ...] = ()
    min_stars: int | None = None
    exclude_topics: tuple[str, ...] = ()
    max_results: int = 5
    token: str | None = field(default=None, repr=False)
    timeout: float = 10.0  # per-provider budget in seconds
    window_days: int = 7
    offset: int = 0

    def cache_key_params(self) -> dict[str, Any]:
        """The parameters that shape the listing, in canonical form."""
        return {
            "providerId": self.provider_id,
            "baseUrl": self.base_url.rstrip("/"),
            "languages": sorted({lang.lower() for lang in self.languages}),
            "minStars": self.min_stars,
            "excludeTopics": sorted(set(self.exclude_topics)),
            "maxResults": self.max_results,
            "windowDays": self.window_days,
            "offset": self.offset,
        }
