"""GitHub GraphQL client with retry and error classification."""

import logging
from typing import Any, Optional

import httpx

from pr_monitor.adapters.github.exceptions import (
    AuthenticationError,
    NetworkError,
    QueryError,
    RateLimitExceededError,
    UpstreamError,
)
from pr_monitor.adapters.github.retry import TRANSIENT_UPSTREAM_MESSAGES, RetryPolicy

logger = logging.getLogger(__name__)

GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"

GATEWAY_STATUS_CODES = (502, 503, 504)


class GitHubGraphQLClient:
    """Execute GraphQL operations against GitHub."""

    def __init__(
        self,
        token: str,
        endpoint: str = GITHUB_GRAPHQL_URL,
        timeout: float = 30.0,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        if not token:
            raise AuthenticationError("GitHub token is required")
        self.token = token
        self.endpoint = endpoint
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()

    async def execute(
        self, query: str, variables: Optional[dict[str, Any]] = None, operation: str = "graphql"
    ) -> dict[str, Any]:
        """Run a GraphQL operation and return its ``data``.

        Transient failures are retried according to the retry policy.

        Raises:
            NetworkError: Transport failure or gateway error after all retries
            UpstreamError: GitHub reported a failure
        """
        payload = {"query": query, "variables": variables or {}}
        return await self.retry_policy.execute(lambda: self._post(payload), description=operation)

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.endpoint, headers=self._get_headers(), json=payload)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request to {self.endpoint} timed out: {e}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"Connection error for {self.endpoint}: {e}") from e

        if response.status_code != 200:
            self._raise_for_status(response)

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Invalid JSON in GitHub response: {e}", status_code=response.status_code
            ) from e

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            self._raise_for_graphql_errors(errors, body)

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise UpstreamError("GitHub response has no data", response_data=body)

        logger.debug("GraphQL response received (%d top-level fields)", len(data))
        return data

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Map a non-200 response to a typed error."""
        status = response.status_code
        try:
            error_data = response.json()
        except ValueError:
            error_data = {"message": response.text}
        if not isinstance(error_data, dict):
            error_data = {"message": str(error_data)}

        message = error_data.get("message") or f"HTTP {status}"
        logger.warning("GitHub API error %d: %s", status, message)

        if status in GATEWAY_STATUS_CODES:
            raise NetworkError(f"HTTP {status}: {message}", status, error_data)
        if status == 401:
            raise AuthenticationError(message, status, error_data)
        if status == 403:
            if "rate limit" in message.lower():
                raise RateLimitExceededError(message, status, error_data)
            raise AuthenticationError(message, status, error_data)
        if 400 <= status < 500:
            raise QueryError(message, status, error_data)
        raise UpstreamError(f"HTTP {status}: {message}", status, error_data)

    def _raise_for_graphql_errors(self, errors: list[Any], body: dict[str, Any]) -> None:
        messages = []
        types = set()
        for error in errors:
            if isinstance(error, dict):
                messages.append(str(error.get("message", "")))
                if error.get("type"):
                    types.add(str(error["type"]))
            else:
                messages.append(str(error))
        message = "; ".join(m for m in messages if m) or "Unknown GraphQL error"
        logger.warning("GraphQL error: %s", message)

        if "RATE_LIMITED" in types:
            raise RateLimitExceededError(message, 200, body)
        if "INTERNAL" in types:
            raise UpstreamError(f"Internal error: {message}", 200, body)
        lowered = message.lower()
        if any(marker in lowered for marker in TRANSIENT_UPSTREAM_MESSAGES):
            raise UpstreamError(message, 200, body)
        raise QueryError(message, 200, body)

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "Content-Type": "application/json",
        }
