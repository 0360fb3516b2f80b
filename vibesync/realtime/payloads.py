"""Payloads of server→client events shared by the gateway and the publishers.

Nothing here touches the Socket.IO server, so the gateway can import it
without going through ``vibesync.realtime.socketio``.
"""

from __future__ import annotations

from typing import Any

from vibesync.messaging.services import unread_count as unread_message_count
from vibesync.notifications.models import Notification


def typing_payload(conversation_id: str, user_id: int, *, is_typing: bool) -> dict:
    return {
        "userId": user_id,
        "conversationId": conversation_id,
        "isTyping": is_typing,
    }


def messages_read_payload(conversation_id: str, user_id: int) -> dict:
    return {"userId": user_id, "conversationId": conversation_id}


def build_unread_payload(user_id: int) -> dict[str, int]:
    return {
        "messages": unread_message_count(user_id),
        "notifications": Notification.objects.filter(
            recipient_id=user_id, is_read=False
        ).count(),
    }


def call_signal_payload(
    sender_id: int,
    call_id: str,
    **fields: Any,
) -> dict[str, Any]:
    return {**fields, "from": sender_id, "callId": call_id}
