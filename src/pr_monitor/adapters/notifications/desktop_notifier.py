"""Desktop notifications through ``notify-send``."""

import asyncio
import logging
import shutil
from typing import Optional

from pr_monitor.core.interfaces import Notifier

logger = logging.getLogger(__name__)


class DesktopNotifier(Notifier):
    """Show notifications with the freedesktop ``notify-send`` command."""

    def __init__(self, app_name: str = "pr-monitor", command: str = "notify-send", timeout: float = 10.0) -> None:
        self.app_name = app_name
        self.command = command
        self.timeout = timeout
        self._executable: Optional[str] = None

    async def request_permission(self) -> bool:
        """Desktop notifications are available when the command is installed."""
        self._executable = shutil.which(self.command)
        if not self._executable:
            logger.warning("%s not found, desktop notifications disabled", self.command)
        return self._executable is not None

    async def notify(self, title: str, body: str) -> None:
        """Display a notification.

        Raises:
            RuntimeError: If the command is missing or exits with an error
        """
        if self._executable is None and not await self.request_permission():
            raise RuntimeError(f"{self.command} is not available")

        process = await asyncio.create_subprocess_exec(
            self._executable,
            f"--app-name={self.app_name}",
            title,
            body,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise RuntimeError(f"{self.command} timed out")

        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip() if stderr else ""
            raise RuntimeError(f"{self.command} exited with {process.returncode}: {message}")
