"""Fake notification adapter — records notifications for testing."""

from uuid import uuid4

from shopping.notifications.port import NotificationKind, NotificationPort


class FakeNotifier(NotificationPort):
    """Notification adapter that records messages in memory for test assertions."""

    def __init__(self):
        self.notifications: list[dict] = []

    def notify(self, kind: NotificationKind, title: str, message: str) -> dict:
        record = {
            "notification_id": f"note-{uuid4().hex[:12]}",
            "kind": kind.value,
            "title": title,
            "message": message,
        }
        self.notifications.append(record)
        return record

    @property
    def last(self) -> dict | None:
        return self.notifications[-1] if self.notifications else None

    def reset(self):
        """Clear recorded notifications (useful between tests)."""
        self.notifications.clear()
