"""Notification side-channel package."""

from splitledger.notifications.logger import NotificationSink, Notifier

__all__ = ["NotificationSink", "Notifier"]
