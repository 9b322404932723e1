"""Retry helpers with exponential backoff and jitter."""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

from pr_monitor.adapters.github.exceptions import (
    AuthenticationError,
    FetchError,
    NetworkError,
    QueryError,
    RateLimitExceededError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_UPSTREAM_MESSAGES = (
    "something went wrong",
    "internal error",
    "internal_error",
    "timedout",
    "timeout",
)


def is_retryable(error: Exception) -> bool:
    """Decide whether a failed call is worth another attempt."""
    if isinstance(error, NetworkError):
        return True
    if isinstance(error, (AuthenticationError, QueryError, RateLimitExceededError)):
        return False
    if isinstance(error, UpstreamError):
        message = str(error).lower()
        return any(marker in message for marker in TRANSIENT_UPSTREAM_MESSAGES)
    return False


@dataclass
class RetryPolicy:
    """Bounded retry budget for upstream calls."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 5.0
    jitter: float = 2.0
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def get_delay(self, attempt: int) -> float:
        """Delay in seconds before retrying after ``attempt`` (1-based) failed."""
        base = min(self.initial_delay * (2 ** (attempt - 1)), self.max_delay)
        return base + self.rng.uniform(0, self.jitter)

    async def execute(self, call: Callable[[], Awaitable[T]], description: str = "request") -> T:
        """Run ``call`` until it succeeds, fails terminally, or the budget runs out.

        Raises:
            FetchError: The last error once retrying stops
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await call()
            except FetchError as e:
                if not is_retryable(e):
                    raise
                if attempt >= self.max_attempts:
                    logger.error(
                        "%s failed after %d attempts: %s",
                        description,
                        attempt,
                        e,
                        extra={"attempt": attempt, "reason": str(e)},
                    )
                    raise

                delay = self.get_delay(attempt)
                logger.warning(
                    "Retrying %s (attempt %d/%d) in %.1fs: %s",
                    description,
                    attempt + 1,
                    self.max_attempts,
                    delay,
                    e,
                    extra={"attempt": attempt + 1, "reason": str(e)},
                )
                await self.sleep(delay)

        raise RuntimeError("unreachable: retry loop exited without result")
