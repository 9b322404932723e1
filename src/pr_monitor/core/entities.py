"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as returned by GitHub (trailing ``Z`` allowed)."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Category:
    """Display category a pull request was found under."""

    title: str
    icon: str


class Facet(str, Enum):
    """Relevance facet a pull request search is run for."""

    AUTHORED = "authored"
    REVIEW_REQUESTED = "review_requested"
    ASSIGNED = "assigned"
    MENTIONED = "mentioned"

    @property
    def qualifier(self) -> str:
        """GitHub search qualifier for this facet."""
        return _QUALIFIERS[self]

    @property
    def category(self) -> Category:
        return _CATEGORIES[self]


_QUALIFIERS = {
    Facet.AUTHORED: "author",
    Facet.REVIEW_REQUESTED: "review-requested",
    Facet.ASSIGNED: "assignee",
    Facet.MENTIONED: "mentions",
}

_CATEGORIES = {
    Facet.AUTHORED: Category(title="Created", icon="✏️"),
    Facet.REVIEW_REQUESTED: Category(title="Review requested", icon="👀"),
    Facet.ASSIGNED: Category(title="Assigned", icon="📌"),
    Facet.MENTIONED: Category(title="Mentioned", icon="💬"),
}


@dataclass(frozen=True)
class Label:
    """Pull request label."""

    name: str
    color: str = ""


@dataclass(frozen=True)
class PullRequest:
    """Open pull request as returned by a facet search."""

    id: str
    number: int
    title: str
    url: str
    updated_at: str
    repository_owner: str
    repository_name: str
    labels: tuple[Label, ...] = ()
    state: str = "OPEN"
    is_draft: bool = False
    created_at: str = ""
    author_login: str = ""
    review_decision: Optional[str] = None
    commit_count: int = 0
    comment_count: int = 0
    review_count: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Pull request id cannot be empty")

    @property
    def composite_key(self) -> str:
        """Ignore-list key in ``owner:repo:number`` form."""
        return composite_key(self.repository_owner, self.repository_name, self.number)

    @property
    def label_names(self) -> set[str]:
        return {label.name for label in self.labels}

    @property
    def updated(self) -> datetime:
        return parse_timestamp(self.updated_at)


def composite_key(owner: str, name: str, number: int) -> str:
    """Build the ``owner:repo:number`` key used for ignore-list membership."""
    if not owner:
        raise ValueError("Repository owner cannot be empty")
    if not name:
        raise ValueError("Repository name cannot be empty")
    return f"{owner}:{name}:{number}"


@dataclass(frozen=True)
class AggregatedPullRequest:
    """Pull request merged across facets with the categories it matched."""

    pull_request: PullRequest
    categories: tuple[Category, ...]

    @property
    def id(self) -> str:
        return self.pull_request.id

    @property
    def updated_at(self) -> str:
        return self.pull_request.updated_at

    @property
    def title(self) -> str:
        return self.pull_request.title


@dataclass(frozen=True)
class RateLimit:
    """GraphQL rate limit descriptor, advisory only."""

    limit: int
    remaining: int
    used: int
    cost: int
    reset_at: str


@dataclass
class FacetBatch:
    """Result of one batched facet request."""

    results: dict[Facet, list[PullRequest]]
    rate_limit: Optional[RateLimit] = None


@dataclass(frozen=True)
class ReadStatus:
    """Last acknowledged update of a pull request."""

    item_id: str
    last_read_at: str
    last_updated_at: str


class ChangeKind(str, Enum):
    """Kind of change detected between two polls."""

    NEW = "new"
    UPDATED = "updated"


@dataclass(frozen=True)
class Change:
    """Pull request that needs a notification this cycle."""

    kind: ChangeKind
    pull_request: AggregatedPullRequest


@dataclass
class PollOutcome:
    """Result of one poll cycle as seen by the caller."""

    items: list[AggregatedPullRequest]
    unread_count: int
    changes: list[Change] = field(default_factory=list)
    rate_limit: Optional[RateLimit] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
