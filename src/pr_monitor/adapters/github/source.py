"""GitHub source for pull requests relevant to a user."""

import logging
from typing import Any, Optional

from pr_monitor.adapters.github.client import GitHubGraphQLClient
from pr_monitor.adapters.github.exceptions import QueryError, UpstreamError
from pr_monitor.adapters.github.queries import (
    FACET_ALIASES,
    GET_PULL_REQUEST,
    GET_VIEWER,
    PAGE_SIZE,
    build_facet_variables,
    build_facets_query,
)
from pr_monitor.core import (
    Facet,
    FacetBatch,
    Label,
    PullRequest,
    PullRequestSource,
    RateLimit,
    parse_timestamp,
)

logger = logging.getLogger(__name__)


class GitHubPullRequestSource(PullRequestSource):
    """Fetch open pull requests per facet through the GraphQL search API."""

    def __init__(self, client: GitHubGraphQLClient, page_size: int = PAGE_SIZE) -> None:
        self.client = client
        self.page_size = page_size

    async def fetch_facets(self, login: str) -> FacetBatch:
        """Fetch every facet and the rate limit in a single request.

        The batch is all-or-nothing: a missing facet fails the whole fetch.
        """
        data = await self.client.execute(
            build_facets_query(self.page_size),
            build_facet_variables(login),
            operation="GetPullRequestFacets",
        )

        results: dict[Facet, list[PullRequest]] = {}
        for facet, alias in FACET_ALIASES.items():
            search = data.get(alias)
            if not isinstance(search, dict):
                raise UpstreamError(f"Facet {alias} missing from response", response_data=data)
            results[facet] = self._parse_nodes(search.get("nodes") or [])
            logger.debug("Facet %s: %d pull requests", facet.value, len(results[facet]))

        return FacetBatch(results=results, rate_limit=self._parse_rate_limit(data.get("rateLimit")))

    async def fetch_viewer(self) -> str:
        data = await self.client.execute(GET_VIEWER, operation="GetViewer")
        viewer = data.get("viewer") or {}
        login = viewer.get("login")
        if not login:
            raise UpstreamError("Viewer login missing from response", response_data=data)
        return login

    async def fetch_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        data = await self.client.execute(
            GET_PULL_REQUEST,
            {"owner": owner, "repo": repo, "number": number},
            operation="GetPullRequest",
        )
        node = (data.get("repository") or {}).get("pullRequest")
        pr = self._create_pull_request(node) if node else None
        if pr is None:
            raise QueryError(f"Pull request {owner}/{repo}#{number} not found", response_data=data)
        return pr

    def _parse_nodes(self, nodes: list[Any]) -> list[PullRequest]:
        pull_requests = []
        for node in nodes:
            # Search results that are not pull requests come back empty
            if not node:
                continue
            pr = self._create_pull_request(node)
            if pr:
                pull_requests.append(pr)
        return pull_requests

    def _create_pull_request(self, node: dict[str, Any]) -> Optional[PullRequest]:
        """Create a pull request from a GraphQL node."""
        try:
            repository = node["repository"]
            parse_timestamp(node["updatedAt"])
            return PullRequest(
                id=node["id"],
                number=int(node["number"]),
                title=node.get("title") or "",
                url=node.get("url") or "",
                updated_at=node["updatedAt"],
                repository_owner=repository["owner"]["login"],
                repository_name=repository["name"],
                labels=tuple(
                    Label(name=label["name"], color=label.get("color") or "")
                    for label in ((node.get("labels") or {}).get("nodes") or [])
                    if label
                ),
                state=node.get("state") or "OPEN",
                is_draft=bool(node.get("isDraft")),
                created_at=node.get("createdAt") or "",
                author_login=(node.get("author") or {}).get("login", ""),
                review_decision=node.get("reviewDecision"),
                commit_count=_total_count(node, "commits"),
                comment_count=_total_count(node, "comments"),
                review_count=_total_count(node, "reviews"),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed pull request node %s: %s", node.get("id", "?"), e)
            return None

    def _parse_rate_limit(self, data: Optional[dict[str, Any]]) -> Optional[RateLimit]:
        if not data:
            return None
        try:
            return RateLimit(
                limit=int(data["limit"]),
                remaining=int(data["remaining"]),
                used=int(data["used"]),
                cost=int(data["cost"]),
                reset_at=str(data["resetAt"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed rate limit: %s", e)
            return None


def _total_count(node: dict[str, Any], field: str) -> int:
    return int((node.get(field) or {}).get("totalCount") or 0)
