"""GitHub GraphQL adapters."""

from pr_monitor.adapters.github.client import GitHubGraphQLClient
from pr_monitor.adapters.github.exceptions import (
    AuthenticationError,
    FetchError,
    NetworkError,
    QueryError,
    RateLimitExceededError,
    UpstreamError,
)
from pr_monitor.adapters.github.retry import RetryPolicy, is_retryable
from pr_monitor.adapters.github.source import GitHubPullRequestSource

__all__ = [
    "GitHubGraphQLClient",
    "GitHubPullRequestSource",
    "RetryPolicy",
    "is_retryable",
    "AuthenticationError",
    "FetchError",
    "NetworkError",
    "QueryError",
    "RateLimitExceededError",
    "UpstreamError",
]
