"""Tests for change detection between polls."""

from pr_monitor.core import ChangeKind, Facet, ReadStateTracker, aggregate, detect_changes


def snapshot(*prs):
    return aggregate({Facet.AUTHORED: list(prs)}, lambda key: False, set())


def test_first_poll_is_silent(tracker: ReadStateTracker, make_pr) -> None:
    """Test no changes are reported without a previous snapshot."""
    current = snapshot(make_pr(id="PR_1"), make_pr(id="PR_2", number=2))

    assert detect_changes(None, current, tracker) == []


def test_new_unread_pull_request(tracker: ReadStateTracker, make_pr) -> None:
    """Test a pull request absent before and unread now is new."""
    previous = snapshot(make_pr(id="PR_1"))
    current = snapshot(make_pr(id="PR_1"), make_pr(id="PR_2", number=2, title="Add widgets"))

    changes = detect_changes(previous, current, tracker)

    assert len(changes) == 1
    assert changes[0].kind == ChangeKind.NEW
    assert changes[0].pull_request.title == "Add widgets"


def test_new_but_already_read(tracker: ReadStateTracker, make_pr) -> None:
    """Test a new pull request the user already read is not reported."""
    tracker.mark_as_read("PR_2", "2024-01-01T12:00:00Z")
    previous = snapshot()
    current = snapshot(make_pr(id="PR_2", updated_at="2024-01-01T12:00:00Z"))

    assert detect_changes(previous, current, tracker) == []


def test_updated_unread_pull_request(tracker: ReadStateTracker, make_pr) -> None:
    """Test a newer timestamp on a known pull request is an update."""
    previous = snapshot(make_pr(id="PR_1", updated_at="2024-01-01T00:00:00Z"))
    current = snapshot(make_pr(id="PR_1", updated_at="2024-01-02T00:00:00Z"))

    changes = detect_changes(previous, current, tracker)

    assert [change.kind for change in changes] == [ChangeKind.UPDATED]


def test_unchanged_pull_request(tracker: ReadStateTracker, make_pr) -> None:
    """Test an unchanged timestamp gives no change even if unread."""
    previous = snapshot(make_pr(id="PR_1"))
    current = snapshot(make_pr(id="PR_1"))

    assert detect_changes(previous, current, tracker) == []


def test_updated_but_read(tracker: ReadStateTracker, make_pr) -> None:
    """Test an update already acknowledged is not reported."""
    tracker.mark_as_read("PR_1", "2024-01-02T00:00:00Z")
    previous = snapshot(make_pr(id="PR_1", updated_at="2024-01-01T00:00:00Z"))
    current = snapshot(make_pr(id="PR_1", updated_at="2024-01-02T00:00:00Z"))

    assert detect_changes(previous, current, tracker) == []


def test_category_change_is_not_a_change(tracker: ReadStateTracker, make_pr) -> None:
    """Test gaining a category without a timestamp change is ignored."""
    pr = make_pr(id="PR_1")
    previous = aggregate({Facet.AUTHORED: [pr]}, lambda key: False, set())
    current = aggregate({Facet.AUTHORED: [pr], Facet.MENTIONED: [pr]}, lambda key: False, set())

    assert detect_changes(previous, current, tracker) == []


def test_new_item_not_reported_twice(tracker: ReadStateTracker, make_pr) -> None:
    """Test an item reported as new is not reported again next cycle."""
    first = snapshot()
    second = snapshot(make_pr(id="PR_1"))
    third = snapshot(make_pr(id="PR_1"))

    assert len(detect_changes(first, second, tracker)) == 1
    assert detect_changes(second, third, tracker) == []
