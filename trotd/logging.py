"""
trotd logging utilities.

Provides configurable logging for HTTP traffic, storage access and the
per-provider outcome of each run. Credentials never reach a log line.
"""

import logging
import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from trotd.types.results import ProviderResult

# Package loggers
_root_logger = logging.getLogger("trotd")
_http_logger = logging.getLogger("trotd.http")
_store_logger = logging.getLogger("trotd.store")
_orchestrator_logger = logging.getLogger("trotd.orchestrator")

# Patterns for credentials that should be masked
_SENSITIVE_PATTERNS = [
    # GitHub classic and fine-grained personal access tokens
    (re.compile(r"\b(gh[pousr]_[A-Za-z0-9]{20,}|github_pat_[A-Za-z0-9_]{20,})\b"), "[TOKEN_REDACTED]"),
    # GitLab personal access tokens
    (re.compile(r"\bglpat-[A-Za-z0-9_\-]{20,}\b"), "[TOKEN_REDACTED]"),
    # Authorization header values
    (re.compile(r"(Authorization['\"]?\s*[:=]\s*['\"]?)(Bearer|token)\s+[^'\"\s,}]+", re.IGNORECASE), r"\1\2 [REDACTED]"),
    # Key/value pairs
    (re.compile(r"(private[-_]token|token|secret|password)(['\"]?\s*[:=]\s*)['\"]?[^'\"\s,&}]+['\"]?", re.IGNORECASE), r"\1\2[REDACTED]"),
]

_DEFAULT_SENSITIVE_KEYS = {"authorization", "private-token", "token", "secret", "password"}


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    store_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure trotd logging.

    Args:
        level: Default log level for all trotd loggers (default: INFO)
        http_level: Log level for HTTP request/response logging (default: same as level)
        store_level: Log level for cache/seen/starred storage (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from trotd.logging import configure_logging

        # Show HTTP traffic while debugging a provider
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _root_logger.setLevel(level)
    _root_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)
    _store_logger.setLevel(store_level if store_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a trotd logger.

    Args:
        name: Logger name suffix (e.g., "http", "store"). If None, returns the package logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _root_logger
    return logging.getLogger(f"trotd.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask credentials in a string.

    Args:
        text: Text that may contain tokens or authorization headers

    Returns:
        Text with credentials replaced by redaction markers
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Lower-case key fragments to mask (default: authorization, tokens, secrets)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if key_lower in sensitive_keys or any(sk in key_lower for sk in sensitive_keys):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
) -> None:
    """Log an outgoing HTTP request at DEBUG level with credentials masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {mask_sensitive_data(url)}"]

    if headers:
        log_parts.append(f"headers={safe_log_dict(dict(headers))}")

    if params:
        log_parts.append(f"params={safe_log_dict(params)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    elapsed_ms: float | None = None,
    attempt: int | None = None,
) -> None:
    """Log an HTTP response at DEBUG level."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {mask_sensitive_data(url)}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    if attempt:
        log_parts.append(f"attempt={attempt + 1}")

    _http_logger.debug(" | ".join(log_parts))


def log_provider_outcome(result: "ProviderResult") -> None:
    """
    Log the terminal outcome of one provider.

    Successful fetches log at INFO, stale fallbacks and empty outcomes at
    WARNING so they surface with the default configuration.
    """
    if result.is_success:
        _orchestrator_logger.info(
            "%s: %d repos%s",
            result.provider_id,
            len(result.entries),
            " (cached)" if result.from_cache else "",
        )
    elif result.is_stale:
        _orchestrator_logger.warning(
            "%s: using stale cache aged %s after %s",
            result.provider_id,
            result.age,
            result.reason.value if result.reason else "failure",
        )
    else:
        _orchestrator_logger.warning(
            "%s: no results (%s: %s)",
            result.provider_id,
            result.reason.value if result.reason else "unknown",
            mask_sensitive_data(result.detail or ""),
        )


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_provider_outcome",
]
