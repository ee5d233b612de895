"""GitLab provider.

GitLab has no trending endpoint; projects active inside the query window
are ranked by star count, so results are approximate.
"""

import asyncio
from typing import Any

from trotd.providers.base import Provider
from trotd.types.repos import ProviderQuery, RepoEntry


class GitLabProvider(Provider):
    """Adapter for the GitLab REST API (v4)."""

    provider_id = "gitlab"
    display_name = "GitLab"
    default_base_url = "https://gitlab.com/api/v4"
    approximate = True

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        return {"PRIVATE-TOKEN": token} if token else {}

    async def fetch(self, query: ProviderQuery) -> list[RepoEntry]:
        """
        Fetch the most starred projects with recent activity.

        The projects API filters on a single language, so a multi-language
        query issues one request per language and merges them by stars.
        """
        if len(query.languages) <= 1:
            language = query.languages[0] if query.languages else None
            entries = await self._fetch_projects(query, language)
        else:
            batches = await asyncio.gather(
                *(self._fetch_projects(query, lang) for lang in query.languages)
            )
            seen = set()
            entries = []
            for entry in sorted(
                (e for batch in batches for e in batch),
                key=lambda e: e.stars_total,
                reverse=True,
            ):
                if entry.repo_id not in seen:
                    seen.add(entry.repo_id)
                    entries.append(entry)
        return self._finalize(entries, query)

    async def _fetch_projects(
        self, query: ProviderQuery, language: str | None
    ) -> list[RepoEntry]:
        params: dict[str, Any] = {
            "order_by": "star_count",
            "sort": "desc",
            "last_activity_after": self._since(query.window_days).isoformat(),
            "per_page": self._page_size(query),
        }
        if language:
            params["with_programming_language"] = language

        data = await self._get_json(
            f"{query.base_url.rstrip('/')}/projects",
            params=params,
            headers=self._auth_headers(query.token),
            budget=query.timeout,
        )
        return self._parse_items(data, lambda item: self._parse_project(item, query, language))

    def _parse_project(
        self, item: dict[str, Any], query: ProviderQuery, language: str | None
    ) -> RepoEntry | None:
        topics = item.get("topics") or item.get("tag_list")
        if self._excluded(topics, query):
            return None
        return self._entry(
            owner=item["namespace"]["full_path"],
            name=item["path"],
            url=item["web_url"],
            stars_total=int(item.get("star_count") or 0),
            # The list endpoint does not report languages; echo the filter
            language=language,
            description=item.get("description"),
        )
