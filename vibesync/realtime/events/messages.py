from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from vibesync.realtime.constants import MESSAGES_READ
from vibesync.realtime.constants import NEW_MESSAGE
from vibesync.realtime.events.unread import publish_unread_counts
from vibesync.realtime.payloads import messages_read_payload
from vibesync.realtime.socketio import emit_event_to_conversation

if TYPE_CHECKING:  # import for type checking only
    from vibesync.messaging.models import Message


def build_message_payload(message: Message) -> dict[str, Any]:
    return {
        "id": message.id,
        "conversationId": message.conversation_id,
        "senderId": message.sender_id,
        "receiverId": message.receiver_id,
        "content": message.content,
        "isRead": message.is_read,
        "createdAt": message.created_at.isoformat() if message.created_at else None,
    }


def publish_message_created(message: Message) -> None:
    """Announce a persisted message to its conversation room."""

    emit_event_to_conversation(
        message.conversation_id,
        NEW_MESSAGE,
        build_message_payload(message),
    )
    publish_unread_counts(message.receiver_id)


def publish_messages_read(conversation_id: str, reader_id: int) -> None:
    emit_event_to_conversation(
        conversation_id,
        MESSAGES_READ,
        messages_read_payload(conversation_id, reader_id),
    )
    publish_unread_counts(reader_id)
