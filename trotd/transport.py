"""
Async HTTP transport for trotd providers.

Handles HTTP communication with automatic retry logic bounded by the
caller's time budget, and maps failures onto the fetch error taxonomy.
"""

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from trotd.exceptions import (
    AuthRequiredError,
    FetchError,
    FetchTimeoutError,
    NetworkError,
    ParseFailureError,
    RateLimitedError,
)
from trotd.logging import log_http_request, log_http_response

USER_AGENT = "trotd (+https://github.com/trending)"


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 2
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503, 504])
    respect_retry_after: bool = True
    max_backoff: float = 8.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)
    base_delay: float = 0.5  # Wait before the first retry


class AsyncHTTPTransport:
    """
    Async HTTP transport shared by all providers of a run.

    Handles:
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - A per-call time budget that caps the sum of attempts and waits
    - Error response mapping into typed fetch errors
    """

    def __init__(
        self,
        timeout: float = 10.0,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            timeout: Upper bound for a single HTTP attempt in seconds
            retry_config: Configuration for retry behavior
            http_transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            transport=http_transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        budget: float | None = None,
    ) -> Any:
        """
        GET a JSON document with automatic retry.

        Args:
            url: Absolute request URL
            params: Query parameters
            headers: Extra request headers (credentials included)
            budget: Total seconds allowed for all attempts and backoff waits

        Returns:
            Parsed JSON response

        Raises:
            FetchError: On provider errors, exhausted retries or exhausted budget
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + budget if budget is not None else None
        last_error: FetchError | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            remaining = self._remaining(deadline, loop)
            if remaining is not None and remaining <= 0:
                break

            log_http_request("GET", url, headers, params)
            started = time.perf_counter()
            try:
                response = await self._client.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=min(self.timeout, remaining) if remaining else self.timeout,
                )
            except httpx.TimeoutException as e:
                last_error = FetchTimeoutError(f"Request to {url} timed out: {e}")
                retry_after = None
            except httpx.RequestError as e:
                # Connection, DNS and TLS errors are retryable
                last_error = NetworkError(f"Request to {url} failed: {e}")
                retry_after = None
            else:
                log_http_response(
                    response.status_code,
                    url,
                    elapsed_ms=(time.perf_counter() - started) * 1000,
                    attempt=attempt,
                )
                if response.status_code < 400:
                    return self._decode(response)

                error = self._parse_error_response(response)
                if not self._should_retry(response.status_code, attempt):
                    raise error

                last_error = error
                retry_after = response.headers.get("Retry-After")

            if attempt >= self.retry_config.max_retries:
                break

            wait_time = self._get_backoff_time(attempt, retry_after)
            remaining = self._remaining(deadline, loop)
            if remaining is not None and wait_time >= remaining:
                # Waiting would overrun the budget; give up with the last error
                break
            await asyncio.sleep(wait_time)

        if last_error is not None:
            raise last_error
        raise FetchTimeoutError(f"Time budget of {budget}s exhausted before requesting {url}")

    @staticmethod
    def _remaining(deadline: float | None, loop: asyncio.AbstractEventLoop) -> float | None:
        if deadline is None:
            return None
        return deadline - loop.time()

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ParseFailureError(f"Invalid JSON in response: {e}") from e

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _get_backoff_time(
        self, attempt: int, retry_after: str | None
    ) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass  # Fall through to exponential backoff

        # base_delay * backoff_factor ^ attempt
        base_wait = self.retry_config.base_delay * self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        return min(wait_time, self.retry_config.max_backoff)

    def _parse_error_response(self, response: httpx.Response) -> FetchError:
        """
        Map an error response onto a typed fetch error.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate FetchError subclass
        """
        status_code = response.status_code
        try:
            message = f"HTTP {status_code} from {response.request.url}"
        except RuntimeError:
            message = f"HTTP {status_code}"

        if status_code == 401:
            return AuthRequiredError(f"{message}: credential missing or rejected")

        rate_limit_exhausted = response.headers.get("X-RateLimit-Remaining") == "0"
        if status_code == 429 or (status_code == 403 and rate_limit_exhausted):
            retry_after_str = response.headers.get("Retry-After")
            try:
                retry_after = int(retry_after_str) if retry_after_str else None
            except ValueError:
                retry_after = None
            return RateLimitedError(f"{message}: rate limited", retry_after)

        return NetworkError(message)
