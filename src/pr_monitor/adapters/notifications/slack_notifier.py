"""Slack notification adapter."""

import logging
from typing import Optional

import httpx

from pr_monitor.core.interfaces import Notifier

logger = logging.getLogger(__name__)


class SlackNotifier(Notifier):
    """Send notifications to Slack via webhook."""

    def __init__(self, webhook_url: Optional[str] = None, timeout: float = 30.0) -> None:
        """Initialize Slack notifier.

        Args:
            webhook_url: Slack webhook URL. If None, notifications are skipped.
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def request_permission(self) -> bool:
        return bool(self.webhook_url)

    async def notify(self, title: str, body: str) -> None:
        """Post a titled message to the webhook.

        Raises:
            httpx.HTTPError: If Slack rejects the message
        """
        if not self.webhook_url:
            return

        payload = {
            "text": f"*{_escape(title)}*\n{_escape(body)}",
            "mrkdwn": True,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.webhook_url, json=payload)
            response.raise_for_status()
        logger.debug("Slack notification sent: %s", title)


def _escape(text: str) -> str:
    """Escape the characters Slack treats as control sequences."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
