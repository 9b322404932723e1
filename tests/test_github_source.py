"""Tests for the GitHub pull request source."""

from unittest.mock import AsyncMock

import pytest

from pr_monitor.adapters.github import GitHubPullRequestSource, QueryError, UpstreamError
from pr_monitor.adapters.github.queries import (
    build_facet_variables,
    build_facets_query,
    build_search_query,
)
from pr_monitor.core import Facet


def node(id: str, number: int = 1, updated_at: str = "2024-01-01T00:00:00Z", labels=()) -> dict:
    return {
        "id": id,
        "number": number,
        "title": f"Title {id}",
        "url": f"https://github.com/octo/widgets/pull/{number}",
        "state": "OPEN",
        "createdAt": "2023-12-01T00:00:00Z",
        "updatedAt": updated_at,
        "isDraft": False,
        "author": {"login": "octocat"},
        "repository": {"name": "widgets", "owner": {"login": "octo"}},
        "reviewDecision": "APPROVED",
        "commits": {"totalCount": 3},
        "comments": {"totalCount": 2},
        "reviews": {"totalCount": 1},
        "labels": {"nodes": [{"name": name, "color": "ff0000"} for name in labels]},
    }


def facets_response(**facets) -> dict:
    data = {
        "rateLimit": {"limit": 5000, "remaining": 4990, "used": 10, "cost": 1, "resetAt": "2024-01-01T01:00:00Z"},
    }
    for alias in ("authored", "assigned", "mentioned", "reviewRequested"):
        data[alias] = {"nodes": facets.get(alias, [])}
    return data


def test_build_search_query() -> None:
    """Test search strings follow the fixed template."""
    assert build_search_query("octocat", Facet.AUTHORED) == "is:pr is:open author:octocat sort:updated-desc"
    assert build_search_query("octocat", Facet.ASSIGNED) == "is:pr is:open assignee:octocat sort:updated-desc"
    assert build_search_query("octocat", Facet.MENTIONED) == "is:pr is:open mentions:octocat sort:updated-desc"
    assert (
        build_search_query("octocat", Facet.REVIEW_REQUESTED)
        == "is:pr is:open review-requested:octocat sort:updated-desc"
    )

    with pytest.raises(ValueError):
        build_search_query("", Facet.AUTHORED)


def test_facets_query_covers_every_facet() -> None:
    """Test the batched document carries the rate limit and all four searches."""
    query = build_facets_query(50)

    assert "rateLimit" in query
    assert query.count("first: 50") == 4
    for alias in ("authored", "assigned", "mentioned", "reviewRequested"):
        assert f"{alias}: search(query: ${alias}Query" in query
    assert set(build_facet_variables("octocat")) == {
        "authoredQuery",
        "assignedQuery",
        "mentionedQuery",
        "reviewRequestedQuery",
    }


@pytest.mark.asyncio
async def test_fetch_facets() -> None:
    """Test facet results and rate limit are parsed."""
    client = AsyncMock()
    client.execute.return_value = facets_response(
        authored=[node("PR_1", labels=("bug",)), None, {}],
        reviewRequested=[node("PR_2", number=2)],
    )
    source = GitHubPullRequestSource(client)

    batch = await source.fetch_facets("octocat")

    assert [pr.id for pr in batch.results[Facet.AUTHORED]] == ["PR_1"]
    assert [pr.id for pr in batch.results[Facet.REVIEW_REQUESTED]] == ["PR_2"]
    assert batch.results[Facet.ASSIGNED] == []
    assert batch.results[Facet.MENTIONED] == []

    pr = batch.results[Facet.AUTHORED][0]
    assert pr.composite_key == "octo:widgets:1"
    assert pr.label_names == {"bug"}
    assert pr.author_login == "octocat"
    assert pr.commit_count == 3

    assert batch.rate_limit.remaining == 4990
    assert batch.rate_limit.reset_at == "2024-01-01T01:00:00Z"

    variables = client.execute.call_args.args[1]
    assert variables["authoredQuery"] == "is:pr is:open author:octocat sort:updated-desc"


@pytest.mark.asyncio
async def test_fetch_facets_is_all_or_nothing() -> None:
    """Test a missing facet fails the whole batch."""
    client = AsyncMock()
    response = facets_response()
    del response["mentioned"]
    client.execute.return_value = response

    with pytest.raises(UpstreamError, match="mentioned"):
        await GitHubPullRequestSource(client).fetch_facets("octocat")


@pytest.mark.asyncio
async def test_malformed_node_skipped() -> None:
    """Test a node missing required fields is skipped, not fatal."""
    client = AsyncMock()
    broken = node("PR_2")
    del broken["repository"]
    client.execute.return_value = facets_response(authored=[node("PR_1"), broken, node("PR_3", updated_at="yesterday")])

    batch = await GitHubPullRequestSource(client).fetch_facets("octocat")

    assert [pr.id for pr in batch.results[Facet.AUTHORED]] == ["PR_1"]


@pytest.mark.asyncio
async def test_fetch_viewer() -> None:
    client = AsyncMock()
    client.execute.return_value = {"viewer": {"login": "octocat"}}

    assert await GitHubPullRequestSource(client).fetch_viewer() == "octocat"


@pytest.mark.asyncio
async def test_fetch_pull_request() -> None:
    client = AsyncMock()
    client.execute.return_value = {"repository": {"pullRequest": node("PR_9", number=9)}}

    pr = await GitHubPullRequestSource(client).fetch_pull_request("octo", "widgets", 9)

    assert pr.id == "PR_9"
    assert client.execute.call_args.args[1] == {"owner": "octo", "repo": "widgets", "number": 9}


@pytest.mark.asyncio
async def test_fetch_pull_request_not_found() -> None:
    client = AsyncMock()
    client.execute.return_value = {"repository": {"pullRequest": None}}

    with pytest.raises(QueryError, match="not found"):
        await GitHubPullRequestSource(client).fetch_pull_request("octo", "widgets", 404)
