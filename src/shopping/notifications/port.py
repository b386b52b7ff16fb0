"""Notification port — abstract interface for user-facing notifications.

The shopping core produces exactly one notification per storefront flow;
rendering it (toast, banner, log line) belongs to the adapter.
"""

from abc import ABC, abstractmethod
from enum import Enum


class NotificationKind(Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class NotificationPort(ABC):
    """Abstract interface for notification adapters."""

    @abstractmethod
    def notify(self, kind: NotificationKind, title: str, message: str) -> dict:
        """Deliver one notification.

        Returns:
            dict with keys: notification_id, kind, title, message
        """
        ...
