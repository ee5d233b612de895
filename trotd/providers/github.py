"""GitHub provider.

Ranks repositories created inside the query window by stars through the
search API. GitHub publishes no trending API, so results are approximate.
"""

from typing import Any

from trotd.providers.base import Provider
from trotd.types.repos import ProviderQuery, RepoEntry, RepoId

# /user/starred page size, and the most pages walked per refresh
STARRED_PAGE_SIZE = 100
MAX_STARRED_PAGES = 10


class GitHubProvider(Provider):
    """Adapter for the GitHub REST API."""

    provider_id = "github"
    display_name = "GitHub"
    default_base_url = "https://api.github.com"
    approximate = True

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def build_search_query(self, query: ProviderQuery) -> str:
        """
        Build the ``q`` parameter for /search/repositories.

        Multiple ``language:`` qualifiers are OR-ed by GitHub search;
        ``-topic:`` qualifiers exclude topics.
        """
        since = self._since(query.window_days).strftime("%Y-%m-%d")
        qualifiers = [f"created:>{since}"]
        if query.min_stars is not None:
            qualifiers.append(f"stars:>={query.min_stars}")
        qualifiers.extend(f"language:{lang}" for lang in query.languages)
        qualifiers.extend(f"-topic:{topic}" for topic in query.exclude_topics)
        return " ".join(qualifiers)

    async def fetch(self, query: ProviderQuery) -> list[RepoEntry]:
        """Fetch the most starred repositories created within the window."""
        base_url = query.base_url.rstrip("/")
        data = await self._get_json(
            f"{base_url}/search/repositories",
            params={
                "q": self.build_search_query(query),
                "sort": "stars",
                "order": "desc",
                "per_page": self._page_size(query),
            },
            headers=self._auth_headers(query.token),
            budget=query.timeout,
        )
        items = data.get("items") if isinstance(data, dict) else None
        entries = self._parse_items(items, lambda item: self._parse_repo(item, query))
        return self._finalize(entries, query)

    def _parse_repo(self, item: dict[str, Any], query: ProviderQuery) -> RepoEntry | None:
        if self._excluded(item.get("topics"), query):
            return None
        return self._entry(
            owner=item["owner"]["login"],
            name=item["name"],
            url=item["html_url"],
            stars_total=int(item.get("stargazers_count") or 0),
            language=item.get("language"),
            description=item.get("description"),
        )

    async def fetch_starred(self, token: str | None, budget: float | None = None) -> set[RepoId]:
        """
        List every repository starred by the token's owner.

        Raises:
            AuthRequiredError: If no token is given or GitHub rejects it
        """
        token = self._require_token(token)
        return await self._collect_starred(
            f"{self.base_url}/user/starred",
            params={"per_page": STARRED_PAGE_SIZE},
            page_size=STARRED_PAGE_SIZE,
            max_pages=MAX_STARRED_PAGES,
            headers=self._auth_headers(token),
            budget=budget,
        )
