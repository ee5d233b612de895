"""Orchestration result data models."""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from trotd.exceptions import FailureKind
from trotd.types.repos import RepoEntry


class OutcomeKind(str, Enum):
    """Terminal outcome of one provider within a run."""

    SUCCESS = "success"
    STALE = "stale"
    EMPTY = "empty"


@dataclass(frozen=True)
class ProviderResult:
    """What one provider contributed to a run."""

    provider_id: str
    kind: OutcomeKind
    entries: tuple[RepoEntry, ...] = ()
    age: timedelta | None = None  # set for STALE
    reason: FailureKind | None = None  # set for STALE and EMPTY
    detail: str | None = None
    from_cache: bool = False  # SUCCESS served from a fresh cache record

    @classmethod
    def success(
        cls,
        provider_id: str,
        entries: list[RepoEntry] | tuple[RepoEntry, ...],
        from_cache: bool = False,
    ) -> "ProviderResult":
        return cls(provider_id, OutcomeKind.SUCCESS, tuple(entries), from_cache=from_cache)

    @classmethod
    def stale(
        cls,
        provider_id: str,
        entries: tuple[RepoEntry, ...],
        age: timedelta,
        reason: FailureKind,
        detail: str | None = None,
    ) -> "ProviderResult":
        return cls(
            provider_id,
            OutcomeKind.STALE,
            tuple(entry.as_stale() for entry in entries),
            age=age,
            reason=reason,
            detail=detail,
        )

    @classmethod
    def empty(
        cls, provider_id: str, reason: FailureKind, detail: str | None = None
    ) -> "ProviderResult":
        return cls(provider_id, OutcomeKind.EMPTY, reason=reason, detail=detail)

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def is_stale(self) -> bool:
        return self.kind is OutcomeKind.STALE

    @property
    def is_empty(self) -> bool:
        return self.kind is OutcomeKind.EMPTY


@dataclass
class RunReport:
    """
    Result of one orchestration run.

    ``entries`` is what the caller should display. ``merged`` is the
    provider output before seen filtering and simple filters; ``results``
    keeps one diagnostic outcome per provider in query order.
    """

    entries: list[RepoEntry]
    merged: list[RepoEntry]
    results: dict[str, ProviderResult]
    warnings: list[str] = field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        """True when every provider ended Empty (nothing, not even stale data)."""
        return bool(self.results) and all(r.is_empty for r in self.results.values())

    @property
    def degraded(self) -> bool:
        return any(not r.is_success for r in self.results.values())

    @property
    def all_seen(self) -> bool:
        """True when fetched entries existed but were all shown earlier today."""
        return bool(self.merged) and not self.entries

    def failure_reasons(self) -> dict[str, str]:
        """Map provider_id to a human-readable reason for every non-success outcome."""
        reasons: dict[str, str] = {}
        for provider_id, result in self.results.items():
            if result.is_success:
                continue
            reason = result.reason.value if result.reason else "unknown"
            if result.is_stale:
                reason = f"{reason} (showing cached results)"
            if result.detail:
                reason = f"{reason}: {result.detail}"
            reasons[provider_id] = reason
        return reasons
