"""Core interfaces for adapters."""

from abc import ABC, abstractmethod

from pr_monitor.core.entities import FacetBatch, PullRequest


class PullRequestSource(ABC):
    """Interface for fetching pull requests from a code host."""

    @abstractmethod
    async def fetch_facets(self, login: str) -> FacetBatch:
        """Fetch all facet result sets for the given user as one batch."""
        pass

    @abstractmethod
    async def fetch_viewer(self) -> str:
        """Return the login of the authenticated user."""
        pass

    @abstractmethod
    async def fetch_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        """Fetch a single pull request."""
        pass


class Notifier(ABC):
    """Interface for notification sinks."""

    @abstractmethod
    async def request_permission(self) -> bool:
        """Check or request permission to display notifications."""
        pass

    @abstractmethod
    async def notify(self, title: str, body: str) -> None:
        """Display a notification. Best effort."""
        pass
