"""Notifier that only writes to the log."""

import logging

from pr_monitor.core.interfaces import Notifier

logger = logging.getLogger(__name__)


class LogNotifier(Notifier):
    """Fallback sink used when no other notifier is configured."""

    async def request_permission(self) -> bool:
        return True

    async def notify(self, title: str, body: str) -> None:
        logger.info("🔔 %s: %s", title, body)
