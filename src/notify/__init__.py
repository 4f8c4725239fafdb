"""Report lifecycle notifications."""

from .notifier import LoggingNotifier, Notification, NotificationType

__all__ = ["LoggingNotifier", "Notification", "NotificationType"]
