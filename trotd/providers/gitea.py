"""Gitea provider (gitea.com, Codeberg and self-hosted instances)."""

from typing import Any

from trotd.exceptions import ParseFailureError
from trotd.providers.base import Provider
from trotd.types.repos import ProviderQuery, RepoEntry, RepoId

# Gitea caps page sizes at 50 by default
MAX_PAGE_SIZE = 50
MAX_STARRED_PAGES = 10


class GiteaProvider(Provider):
    """Adapter for the Gitea REST API (v1)."""

    provider_id = "gitea"
    display_name = "Gitea"
    default_base_url = "https://gitea.com/api/v1"
    approximate = True

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        return {"Authorization": f"token {token}"} if token else {}

    async def fetch(self, query: ProviderQuery) -> list[RepoEntry]:
        """Fetch repositories ranked by stars from /repos/search."""
        data = await self._get_json(
            f"{query.base_url.rstrip('/')}/repos/search",
            params={
                "sort": "stars",
                "order": "desc",
                "limit": MAX_PAGE_SIZE if query.languages else self._page_size(query, MAX_PAGE_SIZE),
            },
            headers=self._auth_headers(query.token),
            budget=query.timeout,
        )
        if not isinstance(data, dict) or data.get("ok") is False:
            raise ParseFailureError("Unexpected Gitea search response", self.provider_id)

        entries = self._parse_items(data.get("data"), lambda item: self._parse_repo(item, query))
        return self._finalize(entries, query)

    def _parse_repo(self, item: dict[str, Any], query: ProviderQuery) -> RepoEntry | None:
        if self._excluded(item.get("topics"), query):
            return None
        return self._entry(
            owner=item["owner"]["login"],
            name=item["name"],
            url=item["html_url"],
            stars_total=int(item.get("stars_count") or 0),
            language=item.get("language") or None,
            description=item.get("description") or None,
        )

    async def fetch_starred(self, token: str | None, budget: float | None = None) -> set[RepoId]:
        """
        List every repository starred by the token's owner.

        Raises:
            AuthRequiredError: If no token is given or Gitea rejects it
        """
        token = self._require_token(token)
        return await self._collect_starred(
            f"{self.base_url}/user/starred",
            params={"limit": MAX_PAGE_SIZE},
            page_size=MAX_PAGE_SIZE,
            max_pages=MAX_STARRED_PAGES,
            headers=self._auth_headers(token),
            budget=budget,
        )
