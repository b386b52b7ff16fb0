"""Notification adapter that writes notifications to the structured log."""

from uuid import uuid4

import structlog

from shopping.notifications.port import NotificationKind, NotificationPort

logger = structlog.get_logger(__name__)

_LEVELS = {
    NotificationKind.SUCCESS: "info",
    NotificationKind.INFO: "info",
    NotificationKind.WARNING: "warning",
    NotificationKind.ERROR: "error",
}


class LoggingNotifier(NotificationPort):
    def notify(self, kind: NotificationKind, title: str, message: str) -> dict:
        notification_id = f"note-{uuid4().hex[:12]}"
        log = getattr(logger, _LEVELS[kind])
        log("Notification", notification_id=notification_id, kind=kind.value, title=title, message=message)
        return {
            "notification_id": notification_id,
            "kind": kind.value,
            "title": title,
            "message": message,
        }
