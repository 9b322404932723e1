"""GitHub API client exceptions."""

from typing import Any, Optional


class FetchError(Exception):
    """Base exception for failed upstream calls."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[dict[str, Any]] = None,
    ) -> None:
        """Initialize fetch error.

        Args:
            message: Error message
            status_code: HTTP status code, if a response was received
            response_data: Decoded response body, if any
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data or {}


class NetworkError(FetchError):
    """Raised when the request never produced a usable response.

    Covers refused connections, timeouts and gateway failures (502/503/504).
    """

    pass


class UpstreamError(FetchError):
    """Raised when GitHub answered with an application level failure."""

    pass


class AuthenticationError(UpstreamError):
    """Raised when the token is missing, invalid or lacks access."""

    pass


class QueryError(UpstreamError):
    """Raised when GitHub rejects the request itself.

    Malformed or invalid GraphQL documents, unknown resources and any 4xx
    not covered by a more specific error.
    """

    pass


class RateLimitExceededError(UpstreamError):
    """Raised when the GraphQL rate limit is exhausted."""

    pass
