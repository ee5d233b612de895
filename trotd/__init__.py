"""trotd - trending repositories of the day across GitHub, GitLab and Gitea."""

from trotd.cache import CacheStore, compute_fingerprint
from trotd.client import AsyncTrotdClient
from trotd.config import Settings, default_state_dir
from trotd.exceptions import (
    AuthRequiredError,
    CacheUnavailableError,
    ConfigurationError,
    FailureKind,
    FetchError,
    FetchTimeoutError,
    NetworkError,
    ParseFailureError,
    RateLimitedError,
    TrotdError,
)
from trotd.logging import configure_logging, get_logger
from trotd.orchestrator import Orchestrator, RunOptions
from trotd.providers import (
    GiteaProvider,
    GitHubProvider,
    GitLabProvider,
    Provider,
    StarredCapable,
    create_provider,
    resolve_provider_id,
)
from trotd.seen import SeenTracker
from trotd.starred import StarredStatusCache
from trotd.transport import AsyncHTTPTransport, RetryConfig
from trotd.types import (
    CacheRecord,
    OutcomeKind,
    ProviderQuery,
    ProviderResult,
    RepoEntry,
    RunReport,
    SeenRecord,
    StarredRecord,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main client
    "AsyncTrotdClient",
    "Settings",
    "default_state_dir",
    # Orchestration
    "Orchestrator",
    "RunOptions",
    # Stores
    "CacheStore",
    "compute_fingerprint",
    "SeenTracker",
    "StarredStatusCache",
    # Providers
    "Provider",
    "StarredCapable",
    "GitHubProvider",
    "GitLabProvider",
    "GiteaProvider",
    "create_provider",
    "resolve_provider_id",
    # Exceptions
    "TrotdError",
    "ConfigurationError",
    "CacheUnavailableError",
    "FailureKind",
    "FetchError",
    "NetworkError",
    "FetchTimeoutError",
    "RateLimitedError",
    "ParseFailureError",
    "AuthRequiredError",
    # Types
    "RepoEntry",
    "ProviderQuery",
    "CacheRecord",
    "OutcomeKind",
    "ProviderResult",
    "RunReport",
    "SeenRecord",
    "StarredRecord",
    # Transport
    "AsyncHTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
