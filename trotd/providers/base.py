"""Provider capability shared by all source-hosting adapters."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, TypeVar, runtime_checkable

from trotd.exceptions import AuthRequiredError, FetchError, FetchTimeoutError, ParseFailureError
from trotd.logging import get_logger
from trotd.types.repos import ProviderQuery, RepoEntry, RepoId

if TYPE_CHECKING:
    from trotd.transport import AsyncHTTPTransport

logger = get_logger("providers")

T = TypeVar("T")


@runtime_checkable
class StarredCapable(Protocol):
    """Providers whose service can list the repositories a user starred."""

    provider_id: str

    async def fetch_starred(self, token: str | None, budget: float | None = None) -> set[RepoId]:
        ...


class Provider(ABC):
    """
    Base class for provider adapters.

    Adapters are stateless between calls. ``approximate`` is a static
    property of the data source and is stamped on every entry returned.
    """

    provider_id: ClassVar[str]
    display_name: ClassVar[str]
    default_base_url: ClassVar[str]
    approximate: ClassVar[bool] = False

    def __init__(
        self, transport: "AsyncHTTPTransport", base_url: str | None = None
    ) -> None:
        """
        Initialize the provider.

        Args:
            transport: HTTP transport used for all requests
            base_url: API root for calls that carry no query (default: the public instance)
        """
        self.transport = transport
        self.base_url = (base_url or self.default_base_url).rstrip("/")

    @abstractmethod
    async def fetch(self, query: ProviderQuery) -> list[RepoEntry]:
        """
        Retrieve the trending listing for a query.

        Raises:
            FetchError: On network, throttling or parse failures
        """

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        return {}

    def _require_token(self, token: str | None) -> str:
        if not token:
            raise AuthRequiredError(
                f"{self.display_name} starred lookup needs a token", self.provider_id
            )
        return token

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        budget: float | None = None,
    ) -> Any:
        """GET through the shared transport, tagging failures with this provider's id."""
        try:
            return await self.transport.get_json(url, params=params, headers=headers, budget=budget)
        except FetchError as e:
            if e.provider_id is None:
                e.provider_id = self.provider_id
            raise

    async def _collect_starred(
        self,
        url: str,
        params: dict[str, Any],
        page_size: int,
        max_pages: int,
        headers: dict[str, str],
        budget: float | None,
    ) -> set[RepoId]:
        """
        Walk a paginated starred listing.

        ``budget`` covers every page together; each request gets whatever
        is left of it.

        Raises:
            FetchTimeoutError: If the budget runs out between pages
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + budget if budget is not None else None
        starred: set[RepoId] = set()
        for page in range(1, max_pages + 1):
            remaining = deadline - loop.time() if deadline is not None else None
            if remaining is not None and remaining <= 0:
                raise FetchTimeoutError(
                    f"{self.display_name} starred lookup exceeded its {budget}s budget",
                    self.provider_id,
                )
            data = await self._get_json(
                url, params={**params, "page": page}, headers=headers, budget=remaining
            )
            repos = self._parse_items(
                data,
                lambda item: (self.provider_id, item["owner"]["login"], item["name"]),
            )
            starred.update(repos)
            if len(repos) < page_size:
                break
        return starred

    def _entry(self, **fields: Any) -> RepoEntry:
        return RepoEntry(provider_id=self.provider_id, approximate=self.approximate, **fields)

    def _parse_items(
        self, items: Any, parse: Callable[[dict[str, Any]], T | None]
    ) -> list[T]:
        """Apply ``parse`` to every item, turning malformed payloads into ParseFailureError."""
        if not isinstance(items, list):
            raise ParseFailureError(
                f"Expected a list of repositories, got {type(items).__name__}",
                self.provider_id,
            )
        parsed: list[T] = []
        try:
            for item in items:
                value = parse(item)
                if value is not None:
                    parsed.append(value)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ParseFailureError(
                f"Malformed {self.display_name} repository payload: {e!r}", self.provider_id
            ) from e
        return parsed

    @staticmethod
    def _since(window_days: int) -> datetime:
        return datetime.now(timezone.utc) - timedelta(days=window_days)

    @staticmethod
    def _page_size(query: ProviderQuery, limit: int = 100) -> int:
        return max(1, min(query.offset + query.max_results, limit))

    @staticmethod
    def _excluded(topics: Iterable[str] | None, query: ProviderQuery) -> bool:
        if not query.exclude_topics or not topics:
            return False
        excluded = {topic.lower() for topic in query.exclude_topics}
        return any(topic.lower() in excluded for topic in topics)

    @staticmethod
    def _finalize(entries: list[RepoEntry], query: ProviderQuery) -> list[RepoEntry]:
        """Apply the client-side language/star filters, then the offset window."""
        if query.languages:
            wanted = {lang.lower() for lang in query.languages}
            entries = [e for e in entries if e.language and e.language.lower() in wanted]
        if query.min_stars is not None:
            entries = [e for e in entries if e.stars_total >= query.min_stars]
        logger.debug(
            "%s: %d repos after filters, taking %d from position %d",
            query.provider_id,
            len(entries),
            query.max_results,
            query.offset,
        )
        return entries[query.offset:query.offset + query.max_results]
