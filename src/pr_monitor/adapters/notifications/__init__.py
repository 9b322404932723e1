"""Notification adapters."""

from pr_monitor.adapters.notifications.desktop_notifier import DesktopNotifier
from pr_monitor.adapters.notifications.log_notifier import LogNotifier
from pr_monitor.adapters.notifications.slack_notifier import SlackNotifier

__all__ = ["DesktopNotifier", "LogNotifier", "SlackNotifier"]
