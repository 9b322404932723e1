"""Tracker for per pull request read state."""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, Optional, Protocol

from pr_monitor.core.entities import ReadStatus, parse_timestamp
from pr_monitor.core.storage import READ_STATUSES, StateStore

logger = logging.getLogger(__name__)


class HasUpdate(Protocol):
    id: str
    updated_at: str


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ReadStateTracker:
    """Track the last update a user acknowledged for each pull request.

    A pull request without a record has never been read and is always
    unread. A read pull request becomes unread again as soon as its
    server-side ``updated_at`` moves past the acknowledged value.
    """

    def __init__(self, store: StateStore, clock: Callable[[], str] = _utc_now) -> None:
        self.store = store
        self.clock = clock
        self._statuses = self._load()

    def reload(self) -> None:
        """Re-read stored statuses so marks made by other processes show up."""
        self._statuses = self._load()

    def mark_as_read(self, item_id: str, updated_at: str) -> ReadStatus:
        """Record ``updated_at`` as acknowledged for ``item_id``.

        The stored update timestamp never moves backwards: marking with an
        older timestamp than the stored one only refreshes ``last_read_at``.
        """
        self.reload()
        last_updated_at = updated_at
        existing = self._statuses.get(item_id)
        if existing is not None and _is_later(existing.last_updated_at, updated_at):
            last_updated_at = existing.last_updated_at

        status = ReadStatus(
            item_id=item_id,
            last_read_at=self.clock(),
            last_updated_at=last_updated_at,
        )
        self._statuses = {**self._statuses, item_id: status}
        self._save()
        return status

    def is_unread(self, item_id: str, updated_at: str) -> bool:
        status = self._statuses.get(item_id)
        if status is None:
            return True
        return _is_newer(updated_at, status.last_updated_at)

    def get_unread_count(self, items: Iterable[HasUpdate]) -> int:
        """Count unread items. Not cached, stored state may change between calls."""
        return sum(1 for item in items if self.is_unread(item.id, item.updated_at))

    def get_status(self, item_id: str) -> Optional[ReadStatus]:
        return self._statuses.get(item_id)

    def statuses(self) -> Iterator[ReadStatus]:
        return iter(list(self._statuses.values()))

    def clear(self) -> None:
        """Forget every read status."""
        self._statuses = {}
        self._save()

    def _load(self) -> dict[str, ReadStatus]:
        statuses: dict[str, ReadStatus] = {}
        for item_id, record in self.store.load_mapping(READ_STATUSES).items():
            last_updated_at = record.get("last_updated_at")
            if not last_updated_at:
                logger.warning("Skipping read status without last_updated_at: %s", item_id)
                continue
            statuses[item_id] = ReadStatus(
                item_id=item_id,
                last_read_at=str(record.get("last_read_at", "")),
                last_updated_at=str(last_updated_at),
            )
        return statuses

    def _save(self) -> None:
        self.store.save_mapping(
            READ_STATUSES,
            {
                item_id: {
                    "last_read_at": status.last_read_at,
                    "last_updated_at": status.last_updated_at,
                }
                for item_id, status in self._statuses.items()
            },
        )


def _is_newer(candidate: str, reference: str) -> bool:
    """Return True if ``candidate`` is strictly later than ``reference``.

    Unparseable timestamps compare as newer so the item stays visible.
    """
    try:
        return parse_timestamp(candidate) > parse_timestamp(reference)
    except ValueError:
        logger.warning("Unparseable timestamp comparing %r with %r", candidate, reference)
        return True


def _is_later(stored: str, incoming: str) -> bool:
    try:
        return parse_timestamp(stored) > parse_timestamp(incoming)
    except ValueError:
        return False
