"""Merge facet result sets into one de-duplicated, categorized list."""

from typing import Callable, Iterable, Mapping

from pr_monitor.core.entities import (
    AggregatedPullRequest,
    Category,
    Facet,
    PullRequest,
)


def aggregate(
    facet_results: Mapping[Facet, Iterable[PullRequest]],
    is_ignored: Callable[[str], bool],
    excluded_labels: Iterable[str],
) -> list[AggregatedPullRequest]:
    """Merge facet results into one list keyed by pull request id.

    Ignored and label-excluded pull requests are dropped from every facet
    before merging. Each remaining pull request carries the categories of
    all facets it appeared in, in the order the facets were processed.

    Args:
        facet_results: Pull requests per facet, iterated in mapping order
        is_ignored: Predicate on the ``owner:repo:number`` key
        excluded_labels: Label names that exclude a pull request

    Returns:
        Aggregated pull requests sorted by ``updated_at`` descending.
        Equal timestamps keep their first-seen order.
    """
    excluded = set(excluded_labels)
    merged: dict[str, PullRequest] = {}
    categories: dict[str, list[Category]] = {}

    for facet, pull_requests in facet_results.items():
        category = facet.category
        for pr in pull_requests:
            if is_ignored(pr.composite_key):
                continue
            if pr.label_names & excluded:
                continue

            if pr.id in merged:
                if category not in categories[pr.id]:
                    categories[pr.id].append(category)
            else:
                merged[pr.id] = pr
                categories[pr.id] = [category]

    aggregated = [
        AggregatedPullRequest(pull_request=pr, categories=tuple(categories[pr_id]))
        for pr_id, pr in merged.items()
    ]
    # sorted() is stable, so ties keep insertion order
    return sorted(aggregated, key=lambda item: item.pull_request.updated, reverse=True)
