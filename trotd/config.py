"""
Environment-driven settings.

Everything the orchestrator needs arrives as fully resolved ProviderQuery
values; this module turns ``TROTD_*`` environment variables into them.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

from trotd.exceptions import ConfigurationError
from trotd.providers import PROVIDERS, resolve_provider_id
from trotd.types.repos import ProviderQuery

ENV_PREFIX = "TROTD_"
APP_NAME = "trotd"

DEFAULT_PROVIDERS = ("github", "gitlab", "gitea")
DEFAULT_TIMEOUT_SECS = 10.0
DEFAULT_GLOBAL_TIMEOUT_SECS = 30.0


def default_state_dir(environ: Mapping[str, str] | None = None) -> Path:
    """
    User-scoped directory for cache records, the seen ledger and starred hints.

    ``$XDG_CACHE_HOME/trotd`` when set, else ``~/.cache/trotd``.
    """
    environ = os.environ if environ is None else environ
    xdg_cache_home = environ.get("XDG_CACHE_HOME")
    if xdg_cache_home:
        return Path(xdg_cache_home) / APP_NAME
    return Path.home() / ".cache" / APP_NAME


def _split_list(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass
class Settings:
    """Resolved configuration for one invocation."""

    state_dir: Path = field(default_factory=default_state_dir)
    providers: tuple[str, ...] = DEFAULT_PROVIDERS
    max_per_provider: int = 5
    languages: tuple[str, ...] = ()
    min_stars: int | None = None
    exclude_topics: tuple[str, ...] = ()
    window_days: int = 7
    cache_ttl_mins: int = 60
    timeout_secs: float = DEFAULT_TIMEOUT_SECS
    provider_timeouts: dict[str, float] = field(default_factory=dict)
    global_timeout_secs: float = DEFAULT_GLOBAL_TIMEOUT_SECS
    tokens: dict[str, str] = field(default_factory=dict, repr=False)
    base_urls: dict[str, str] = field(default_factory=dict)
    show_starred: bool = False
    ascii_only: bool = False

    def __post_init__(self) -> None:
        self.providers = tuple(dict.fromkeys(resolve_provider_id(p) for p in self.providers))
        if self.max_per_provider < 1:
            raise ConfigurationError("max_per_provider must be at least 1")
        if self.timeout_secs <= 0 or self.global_timeout_secs <= 0:
            raise ConfigurationError("timeouts must be positive")

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(minutes=self.cache_ttl_mins)

    def base_url_for(self, provider_id: str) -> str:
        return self.base_urls.get(provider_id) or PROVIDERS[provider_id].default_base_url

    def query_for(self, provider_id: str) -> ProviderQuery:
        """Build the fully resolved query for one provider."""
        provider_id = resolve_provider_id(provider_id)
        return ProviderQuery(
            provider_id=provider_id,
            base_url=self.base_url_for(provider_id),
            languages=self.languages,
            min_stars=self.min_stars,
            exclude_topics=self.exclude_topics,
            max_results=self.max_per_provider,
            token=self.tokens.get(provider_id),
            timeout=self.provider_timeouts.get(provider_id, self.timeout_secs),
            window_days=self.window_days,
        )

    def queries(self) -> dict[str, ProviderQuery]:
        return {provider_id: self.query_for(provider_id) for provider_id in self.providers}

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Create settings from environment variables.

        Environment variables:
            TROTD_STATE_DIR: Persistent state directory (default: XDG cache dir)
            TROTD_PROVIDERS: Enabled providers, comma-separated (aliases gh, gl, ge)
            TROTD_MAX_PER_PROVIDER: Maximum results per provider
            TROTD_LANGUAGES: Language filter, comma-separated
            TROTD_MIN_STARS: Minimum star threshold
            TROTD_EXCLUDE_TOPICS: Topics to exclude, comma-separated
            TROTD_WINDOW_DAYS: Activity window for approximate rankings
            TROTD_CACHE_TTL_MINS: Cache time-to-live in minutes
            TROTD_TIMEOUT_SECS: Default per-provider budget
            TROTD_<PROVIDER>_TIMEOUT_SECS: Per-provider budget override
            TROTD_GLOBAL_TIMEOUT_SECS: Budget for the whole run
            TROTD_<PROVIDER>_TOKEN: Credential per provider
            TROTD_<PROVIDER>_BASE_URL: API root per provider
            TROTD_SHOW_STARRED: Annotate entries starred by the user
            TROTD_ASCII_ONLY: Drop mostly non-ASCII listings

        Raises:
            ConfigurationError: If a value is malformed or a provider is unknown
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value.strip() if value and value.strip() else None

        def get_int(name: str) -> int | None:
            value = get(name)
            if value is None:
                return None
            try:
                return int(value)
            except ValueError:
                raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from None

        def get_float(name: str) -> float | None:
            value = get(name)
            if value is None:
                return None
            try:
                return float(value)
            except ValueError:
                raise ConfigurationError(f"{ENV_PREFIX}{name} must be a number, got {value!r}") from None

        def get_bool(name: str) -> bool:
            value = get(name)
            if value is None:
                return False
            if value.lower() in ("1", "true", "yes", "on"):
                return True
            if value.lower() in ("0", "false", "no", "off"):
                return False
            raise ConfigurationError(f"{ENV_PREFIX}{name} must be a boolean, got {value!r}")

        kwargs: dict[str, Any] = {}
        state_dir = get("STATE_DIR")
        kwargs["state_dir"] = Path(state_dir).expanduser() if state_dir else default_state_dir(env)
        providers = _split_list(get("PROVIDERS"))
        if providers:
            kwargs["providers"] = providers
        for key, name in (
            ("max_per_provider", "MAX_PER_PROVIDER"),
            ("min_stars", "MIN_STARS"),
            ("window_days", "WINDOW_DAYS"),
            ("cache_ttl_mins", "CACHE_TTL_MINS"),
        ):
            value = get_int(name)
            if value is not None:
                kwargs[key] = value
        for key, name in (
            ("timeout_secs", "TIMEOUT_SECS"),
            ("global_timeout_secs", "GLOBAL_TIMEOUT_SECS"),
        ):
            value = get_float(name)
            if value is not None:
                kwargs[key] = value

        kwargs["languages"] = _split_list(get("LANGUAGES"))
        kwargs["exclude_topics"] = _split_list(get("EXCLUDE_TOPICS"))
        kwargs["show_starred"] = get_bool("SHOW_STARRED")
        kwargs["ascii_only"] = get_bool("ASCII_ONLY")

        tokens: dict[str, str] = {}
        base_urls: dict[str, str] = {}
        provider_timeouts: dict[str, float] = {}
        for provider_id in PROVIDERS:
            upper = provider_id.upper()
            token = get(f"{upper}_TOKEN")
            if token:
                tokens[provider_id] = token
            base_url = get(f"{upper}_BASE_URL")
            if base_url:
                base_urls[provider_id] = base_url
            timeout = get_float(f"{upper}_TIMEOUT_SECS")
            if timeout is not None:
                provider_timeouts[provider_id] = timeout
        kwargs["tokens"] = tokens
        kwargs["base_urls"] = base_urls
        kwargs["provider_timeouts"] = provider_timeouts

        return cls(**kwargs)
