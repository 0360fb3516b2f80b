from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from vibesync.realtime.constants import NOTIFICATION
from vibesync.realtime.events.unread import publish_unread_counts
from vibesync.realtime.socketio import emit_event_to_user

if TYPE_CHECKING:  # import for type checking only
    from vibesync.notifications.models import Notification


def build_notification_payload(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "type": notification.notification_type,
        "title": notification.title,
        "message": notification.message,
        "relatedId": notification.related_id,
        "relatedUserId": notification.related_user_id,
        "isRead": notification.is_read,
        "createdAt": (
            notification.created_at.isoformat() if notification.created_at else None
        ),
    }


def publish_notification_created(notification: Notification) -> None:
    """Publish a newly created Notification to the recipient in realtime."""

    payload = build_notification_payload(notification)
    emit_event_to_user(notification.recipient_id, NOTIFICATION, payload)
    publish_unread_counts(notification.recipient_id)
