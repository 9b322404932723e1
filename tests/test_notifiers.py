"""Tests for notification adapters."""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from pr_monitor.adapters.notifications import DesktopNotifier, LogNotifier, SlackNotifier


@pytest.mark.asyncio
async def test_slack_notify_success() -> None:
    """Test successful Slack notification."""
    notifier = SlackNotifier("https://hooks.slack.com/services/test")

    with patch("httpx.AsyncClient") as mock_client:
        mock_response = Mock()
        mock_response.raise_for_status = Mock()

        mock_post = AsyncMock(return_value=mock_response)
        mock_client.return_value.__aenter__.return_value.post = mock_post

        await notifier.notify("New pull request", "Fix <script> & stuff")

        call_args = mock_post.call_args
        assert call_args.args[0] == "https://hooks.slack.com/services/test"

        payload = call_args.kwargs["json"]
        assert payload["text"] == "*New pull request*\nFix &lt;script&gt; &amp; stuff"
        assert payload["mrkdwn"] is True


@pytest.mark.asyncio
async def test_slack_no_webhook() -> None:
    """Test that notification is skipped when no webhook is configured."""
    notifier = SlackNotifier(None)

    assert await notifier.request_permission() is False
    await notifier.notify("Title", "Body")


@pytest.mark.asyncio
async def test_slack_api_error_raises() -> None:
    """Test Slack errors reach the caller, which decides whether to swallow them."""
    notifier = SlackNotifier("https://hooks.slack.com/services/test")

    with patch("httpx.AsyncClient") as mock_client:
        mock_response = Mock()
        mock_response.raise_for_status = Mock(side_effect=httpx.HTTPError("API Error"))
        mock_client.return_value.__aenter__.return_value.post = AsyncMock(return_value=mock_response)

        with pytest.raises(httpx.HTTPError):
            await notifier.notify("Title", "Body")


@pytest.mark.asyncio
async def test_desktop_permission_depends_on_command() -> None:
    """Test desktop notifications require notify-send on PATH."""
    with patch("shutil.which", return_value=None):
        assert await DesktopNotifier().request_permission() is False
    with patch("shutil.which", return_value="/usr/bin/notify-send"):
        assert await DesktopNotifier().request_permission() is True


@pytest.mark.asyncio
async def test_desktop_notify_runs_command() -> None:
    """Test the title and body are passed as separate arguments."""
    process = Mock()
    process.communicate = AsyncMock(return_value=(b"", b""))
    process.returncode = 0

    with patch("shutil.which", return_value="/usr/bin/notify-send"), patch(
        "asyncio.create_subprocess_exec", AsyncMock(return_value=process)
    ) as mock_exec:
        await DesktopNotifier().notify("New pull request", "Add widgets")

    args = mock_exec.call_args.args
    assert args == ("/usr/bin/notify-send", "--app-name=pr-monitor", "New pull request", "Add widgets")


@pytest.mark.asyncio
async def test_desktop_notify_failure_raises() -> None:
    process = Mock()
    process.communicate = AsyncMock(return_value=(b"", b"no display"))
    process.returncode = 1

    with patch("shutil.which", return_value="/usr/bin/notify-send"), patch(
        "asyncio.create_subprocess_exec", AsyncMock(return_value=process)
    ):
        with pytest.raises(RuntimeError, match="no display"):
            await DesktopNotifier().notify("Title", "Body")


@pytest.mark.asyncio
async def test_desktop_notify_without_command() -> None:
    with patch("shutil.which", return_value=None):
        with pytest.raises(RuntimeError, match="not available"):
            await DesktopNotifier().notify("Title", "Body")


@pytest.mark.asyncio
async def test_log_notifier(caplog: pytest.LogCaptureFixture) -> None:
    notifier = LogNotifier()

    with caplog.at_level("INFO"):
        assert await notifier.request_permission() is True
        await notifier.notify("Pull request updated", "Add widgets")

    assert "Pull request updated: Add widgets" in caplog.text
