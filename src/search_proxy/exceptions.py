"""Search proxy exception hierarchy.

Candidate errors are raised inside the fetch layer and converted into
structured error records at the candidate boundary; they never reach the
HTTP caller. Only configuration errors surface, and only at start-up.

Exception Hierarchy:
    SearchProxyError (base)
    ├── CandidateError
    │   ├── UpstreamTimeoutError
    │   ├── UpstreamStatusError
    │   ├── UpstreamNetworkError
    │   ├── MalformedPayloadError
    │   │   └── ScrapeParseError
    │   └── EmptyResultError
    └── ConfigError
"""

from typing import Optional


class SearchProxyError(Exception):
    """Base exception for all search proxy errors."""

    def __init__(self, message: str, context: Optional[dict] = None):
        """Initialize search proxy exception.

        Args:
            message: Error message
            context: Optional context dictionary for debugging
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation with context."""
        if self.context:
            context_str = "; ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# Candidate Errors

class CandidateError(SearchProxyError):
    """Base exception for a single candidate URL that could not be used.

    Attributes:
        url: Outbound URL of the failed candidate
    """

    kind = "candidate_error"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if url:
            context["url"] = url
        super().__init__(message, context)
        self.url = url


class UpstreamTimeoutError(CandidateError):
    """Raised when a candidate fetch exceeds its timeout.

    Attributes:
        timeout: Timeout that was exceeded, in seconds
    """

    kind = "timeout"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if timeout is not None:
            context["timeout"] = timeout
        super().__init__(message, url, context)
        self.timeout = timeout


class UpstreamStatusError(CandidateError):
    """Raised when an upstream answers with a non-success status.

    Attributes:
        status_code: HTTP status code received
    """

    kind = "http_status"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, url, context)
        self.status_code = status_code


class UpstreamNetworkError(CandidateError):
    """Raised on connection-level failures (DNS, refused, reset, TLS)."""

    kind = "network"


class MalformedPayloadError(CandidateError):
    """Raised when a payload is not the shape its schema family expects."""

    kind = "malformed"


class ScrapeParseError(MalformedPayloadError):
    """Raised when the embedded initial-data blob cannot be found or parsed."""

    kind = "parse_failed"


class EmptyResultError(CandidateError):
    """Raised when a structurally valid payload normalizes to zero entries."""

    kind = "empty"


# Configuration Errors

class ConfigError(SearchProxyError):
    """Raised when settings are invalid at start-up.

    Attributes:
        field: Settings field that failed validation
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if field:
            context["field"] = field
        super().__init__(message, context)
        self.field = field


__all__ = [
    "SearchProxyError",
    "CandidateError",
    "UpstreamTimeoutError",
    "UpstreamStatusError",
    "UpstreamNetworkError",
    "MalformedPayloadError",
    "ScrapeParseError",
    "EmptyResultError",
    "ConfigError",
]
