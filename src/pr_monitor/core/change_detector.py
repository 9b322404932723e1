"""Detect new and updated pull requests between two polls."""

from typing import Optional, Sequence

from pr_monitor.core.entities import AggregatedPullRequest, Change, ChangeKind
from pr_monitor.core.read_state import ReadStateTracker


def detect_changes(
    previous: Optional[Sequence[AggregatedPullRequest]],
    current: Sequence[AggregatedPullRequest],
    tracker: ReadStateTracker,
) -> list[Change]:
    """Classify unread pull requests of ``current`` against ``previous``.

    Returns nothing when there is no previous snapshot (first poll). Only
    identity and ``updated_at`` are compared, category changes are not
    reported.
    """
    if previous is None:
        return []

    previous_by_id = {item.id: item for item in previous}
    changes: list[Change] = []

    for item in current:
        if not tracker.is_unread(item.id, item.updated_at):
            continue

        before = previous_by_id.get(item.id)
        if before is None:
            changes.append(Change(kind=ChangeKind.NEW, pull_request=item))
        elif before.pull_request.updated < item.pull_request.updated:
            changes.append(Change(kind=ChangeKind.UPDATED, pull_request=item))

    return changes
