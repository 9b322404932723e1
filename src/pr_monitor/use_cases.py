"""Business logic use cases."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from pr_monitor.adapters.github.exceptions import FetchError
from pr_monitor.core import (
    AggregatedPullRequest,
    Change,
    ChangeKind,
    ExcludedLabels,
    IgnoreList,
    Notifier,
    PollOutcome,
    PullRequest,
    PullRequestSource,
    RateLimit,
    ReadStateTracker,
    aggregate,
    detect_changes,
)

logger = logging.getLogger(__name__)

NOTIFICATION_TITLES = {
    ChangeKind.NEW: "New pull request",
    ChangeKind.UPDATED: "Pull request updated",
}


class NotificationDispatcher:
    """Send notifications for detected changes.

    Each change produces one ``notify`` call per configured sink, so with
    desktop and Slack both enabled a change is announced twice, once on each.
    """

    def __init__(self, notifiers: Sequence[Notifier]) -> None:
        self.notifiers = list(notifiers)
        self._granted: set[int] = set()

    async def dispatch(self, changes: Sequence[Change]) -> int:
        """Deliver notifications for ``changes``.

        Failures are logged and never raised.

        Returns:
            Number of notifications delivered
        """
        delivered = 0
        for change in changes:
            title = NOTIFICATION_TITLES[change.kind]
            body = change.pull_request.title
            for notifier in self.notifiers:
                if await self._send(notifier, title, body):
                    delivered += 1
        return delivered

    async def _send(self, notifier: Notifier, title: str, body: str) -> bool:
        try:
            if not await self._has_permission(notifier):
                return False
            await notifier.notify(title, body)
            return True
        except Exception as e:
            logger.warning("Notification via %s failed: %s", type(notifier).__name__, e)
            return False

    async def _has_permission(self, notifier: Notifier) -> bool:
        """Ask until a sink grants permission, then remember the grant."""
        key = id(notifier)
        if key in self._granted:
            return True
        if not await notifier.request_permission():
            logger.warning("Notification permission not granted for %s", type(notifier).__name__)
            return False
        self._granted.add(key)
        return True


class PullRequestMonitor:
    """Poll pull request facets and keep the aggregated snapshot current.

    One cycle is fetch, aggregate, diff, notify. Cycles never overlap and a
    failed fetch keeps the last successful snapshot.
    """

    def __init__(
        self,
        source: PullRequestSource,
        ignore_list: IgnoreList,
        excluded_labels: ExcludedLabels,
        tracker: ReadStateTracker,
        dispatcher: NotificationDispatcher,
        login: Optional[str] = None,
    ) -> None:
        self.source = source
        self.ignore_list = ignore_list
        self.excluded_labels = excluded_labels
        self.tracker = tracker
        self.dispatcher = dispatcher
        self.login = login
        self._snapshot: Optional[list[AggregatedPullRequest]] = None
        self._rate_limit: Optional[RateLimit] = None
        self._last_error: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def items(self) -> list[AggregatedPullRequest]:
        return list(self._snapshot or [])

    @property
    def rate_limit(self) -> Optional[RateLimit]:
        return self._rate_limit

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def unread_count(self) -> int:
        return self.tracker.get_unread_count(self.items)

    async def run_cycle(self) -> PollOutcome:
        """Run one poll cycle."""
        async with self._lock:
            self._reload_state()
            try:
                if not self.login:
                    self.login = await self.source.fetch_viewer()
                    logger.info("Monitoring pull requests for %s", self.login)
                batch = await self.source.fetch_facets(self.login)
            except FetchError as e:
                self._last_error = str(e)
                logger.error("Poll failed, keeping previous snapshot: %s", e)
                return PollOutcome(
                    items=self.items,
                    unread_count=self.unread_count,
                    rate_limit=self._rate_limit,
                    error=self._last_error,
                )

            current = aggregate(
                batch.results,
                self.ignore_list.is_ignored,
                self.excluded_labels.as_set(),
            )
            changes = detect_changes(self._snapshot, current, self.tracker)

            self._snapshot = current
            if batch.rate_limit is not None:
                self._rate_limit = batch.rate_limit
            self._last_error = None

            if changes:
                await self.dispatcher.dispatch(changes)

            outcome = PollOutcome(
                items=self.items,
                unread_count=self.unread_count,
                changes=changes,
                rate_limit=self._rate_limit,
            )
            logger.info(
                "Poll complete: %d pull requests, %d unread, %d changes",
                len(outcome.items),
                outcome.unread_count,
                len(changes),
            )
            return outcome

    def _reload_state(self) -> None:
        # The CLI edits read state and policies from other processes
        self.tracker.reload()
        self.ignore_list.reload()
        self.excluded_labels.reload()

    async def run_forever(
        self,
        interval: float = 60.0,
        max_cycles: Optional[int] = None,
        on_cycle: Optional[Callable[[PollOutcome], Awaitable[None]]] = None,
    ) -> None:
        """Poll every ``interval`` seconds, scheduling the next cycle after the previous one ends."""
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            outcome = await self.run_cycle()
            cycles += 1
            if on_cycle is not None:
                await on_cycle(outcome)
            if max_cycles is not None and cycles >= max_cycles:
                break
            await asyncio.sleep(interval)


class PullRequestWatcher:
    """Keep a single pull request fresh while it is being viewed."""

    def __init__(self, source: PullRequestSource, owner: str, repo: str, number: int) -> None:
        self.source = source
        self.owner = owner
        self.repo = repo
        self.number = number
        self.pull_request: Optional[PullRequest] = None
        self.last_error: Optional[str] = None

    async def refresh(self) -> Optional[PullRequest]:
        """Refetch the pull request. Keeps the previous value on failure."""
        try:
            self.pull_request = await self.source.fetch_pull_request(self.owner, self.repo, self.number)
            self.last_error = None
        except FetchError as e:
            self.last_error = str(e)
            logger.error("Refreshing %s/%s#%d failed: %s", self.owner, self.repo, self.number, e)
        return self.pull_request

    async def run_forever(
        self,
        interval: float = 30.0,
        max_cycles: Optional[int] = None,
        on_update: Optional[Callable[[Optional[PullRequest]], Awaitable[None]]] = None,
    ) -> None:
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            pull_request = await self.refresh()
            cycles += 1
            if on_update is not None:
                await on_update(pull_request)
            if max_cycles is not None and cycles >= max_cycles:
                break
            await asyncio.sleep(interval)
