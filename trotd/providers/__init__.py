"""Provider adapters and the registry that selects them by name."""

from typing import TYPE_CHECKING

from trotd.exceptions import ConfigurationError
from trotd.providers.base import Provider, StarredCapable
from trotd.providers.gitea import GiteaProvider
from trotd.providers.github import GitHubProvider
from trotd.providers.gitlab import GitLabProvider

if TYPE_CHECKING:
    from trotd.transport import AsyncHTTPTransport

PROVIDERS: dict[str, type[Provider]] = {
    GitHubProvider.provider_id: GitHubProvider,
    GitLabProvider.provider_id: GitLabProvider,
    GiteaProvider.provider_id: GiteaProvider,
}

ALIASES = {
    "gh": "github",
    "gl": "gitlab",
    "ge": "gitea",
}


def resolve_provider_id(name: str) -> str:
    """
    Resolve a provider name or short alias to its canonical id.

    Raises:
        ConfigurationError: If the name is not a known provider
    """
    key = name.strip().lower()
    key = ALIASES.get(key, key)
    if key not in PROVIDERS:
        known = ", ".join(sorted(PROVIDERS) + sorted(ALIASES))
        raise ConfigurationError(f"Unknown provider: {name!r} (known: {known})")
    return key


def create_provider(
    name: str, transport: "AsyncHTTPTransport", base_url: str | None = None
) -> Provider:
    """Instantiate the adapter registered under ``name``."""
    return PROVIDERS[resolve_provider_id(name)](transport, base_url)


__all__ = [
    "Provider",
    "StarredCapable",
    "GitHubProvider",
    "GitLabProvider",
    "GiteaProvider",
    "PROVIDERS",
    "ALIASES",
    "resolve_provider_id",
    "create_provider",
]
