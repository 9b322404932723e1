"""Shared fixtures."""

from pathlib import Path
from typing import Callable

import pytest

from pr_monitor.core import Label, PullRequest, ReadStateTracker, StateStore


@pytest.fixture
def make_pr() -> Callable[..., PullRequest]:
    """Factory for pull requests with sensible defaults."""

    def _make(
        id: str = "PR_1",
        updated_at: str = "2024-01-01T12:00:00Z",
        number: int = 1,
        owner: str = "octo",
        repo: str = "widgets",
        labels: tuple[str, ...] = (),
        title: str = "",
    ) -> PullRequest:
        return PullRequest(
            id=id,
            number=number,
            title=title or f"Pull request {id}",
            url=f"https://github.com/{owner}/{repo}/pull/{number}",
            updated_at=updated_at,
            repository_owner=owner,
            repository_name=repo,
            labels=tuple(Label(name=name) for name in labels),
        )

    return _make


@pytest.fixture
def store(tmp_path: Path) -> StateStore:
    return StateStore(tmp_path / "state")


@pytest.fixture
def tracker(store: StateStore) -> ReadStateTracker:
    return ReadStateTracker(store, clock=lambda: "2024-06-01T00:00:00+00:00")
