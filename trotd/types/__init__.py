"""trotd type definitions.

This module exports all data model types used by the package.
"""

from trotd.types.cache import CacheRecord
from trotd.types.repos import ProviderQuery, RepoEntry, RepoId
from trotd.types.results import OutcomeKind, ProviderResult, RunReport
from trotd.types.seen import SeenRecord, StarredRecord

__all__ = [
    # Repository listings
    "RepoEntry",
    "RepoId",
    "ProviderQuery",
    # Cache
    "CacheRecord",
    # Orchestration results
    "OutcomeKind",
    "ProviderResult",
    "RunReport",
    # Seen ledger and starred hints
    "SeenRecord",
    "StarredRecord",
]
