from __future__ import annotations

from vibesync.realtime.constants import UNREAD_COUNT
from vibesync.realtime.payloads import build_unread_payload
from vibesync.realtime.socketio import emit_event_to_user

__all__ = ["build_unread_payload", "publish_unread_counts"]


def publish_unread_counts(user_id: int) -> None:
    """Push the user's unread message/notification counters to all their tabs."""

    emit_event_to_user(user_id, UNREAD_COUNT, build_unread_payload(user_id))
