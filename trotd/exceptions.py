"""trotd exception classes."""

from enum import Enum


class FailureKind(str, Enum):
    """Why a provider (or a store) could not deliver."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    PARSE_FAILURE = "parse_failure"
    CACHE_UNAVAILABLE = "cache_unavailable"
    AUTH_REQUIRED = "auth_required"


class TrotdError(Exception):
    """Base exception for all trotd errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(TrotdError):
    """Raised when settings are invalid or a provider name is unknown."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class CacheUnavailableError(TrotdError):
    """Raised when persistent state cannot be read or written."""

    kind = FailureKind.CACHE_UNAVAILABLE

    def __init__(self, message: str) -> None:
        super().__init__("CACHE_UNAVAILABLE", message)


class FetchError(TrotdError):
    """Base exception for provider fetch failures."""

    kind: FailureKind = FailureKind.NETWORK

    def __init__(self, message: str, provider_id: str | None = None) -> None:
        self.provider_id = provider_id
        super().__init__(self.kind.name, message)


class NetworkError(FetchError):
    """Raised on connection, DNS, TLS or unexpected HTTP status failures."""

    kind = FailureKind.NETWORK


class FetchTimeoutError(FetchError):
    """Raised when a fetch exceeds its time budget."""

    kind = FailureKind.TIMEOUT


class RateLimitedError(FetchError):
    """Raised when the provider reports throttling."""

    kind = FailureKind.RATE_LIMITED

    def __init__(
        self,
        message: str,
        retry_after: int | None = None,
        provider_id: str | None = None,
    ) -> None:
        super().__init__(message, provider_id)
        self.retry_after = retry_after


class ParseFailureError(FetchError):
    """Raised when a provider response cannot be understood."""

    kind = FailureKind.PARSE_FAILURE


class AuthRequiredError(FetchError):
    """Raised when a credential is needed but missing or rejected."""

    kind = FailureKind.AUTH_REQUIRED
