from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db.models import Count
from django.db.models import Q

from vibesync.messaging.conversations import other_participant
from vibesync.messaging.conversations import participants
from vibesync.messaging.models import Message

if TYPE_CHECKING:  # import for type checking only
    from django.db.models import QuerySet

    from vibesync.users.models import User


@dataclass
class ConversationSummary:
    conversation_id: str
    contact: User
    last_message: Message
    unread_count: int


def send_message(sender: User, receiver: User, content: str) -> Message:
    content = (content or "").strip()
    if not content:
        msg = "Message content cannot be empty."
        raise ValueError(msg)
    if sender.pk == receiver.pk:
        msg = "Cannot send a message to yourself."
        raise ValueError(msg)
    return Message.objects.create(sender=sender, receiver=receiver, content=content)


def conversation_messages(conversation_id: str) -> QuerySet[Message]:
    """Messages exchanged in a conversation, newest first."""
    low, high = participants(conversation_id)
    return Message.objects.filter(
        Q(sender_id=low, receiver_id=high) | Q(sender_id=high, receiver_id=low)
    ).select_related("sender", "receiver")


def mark_conversation_read(conversation_id: str, reader_id: int) -> int:
    """Flag every message the reader received in the conversation as read."""
    peer_id = other_participant(conversation_id, reader_id)
    return Message.objects.filter(
        sender_id=peer_id,
        receiver_id=reader_id,
        is_read=False,
    ).update(is_read=True)


def mark_message_read(message: Message) -> bool:
    if message.is_read:
        return False
    message.is_read = True
    message.save(update_fields=["is_read"])
    return True


def unread_count(user_id: int) -> int:
    return Message.objects.filter(receiver_id=user_id, is_read=False).count()


def conversation_summaries(user: User) -> list[ConversationSummary]:
    """One entry per contact the user exchanged messages with, latest first."""
    unread_by_sender = dict(
        Message.objects.filter(receiver=user, is_read=False)
        .values_list("sender_id")
        .annotate(total=Count("id"))
    )
    latest: dict[int, Message] = {}
    messages = (
        Message.objects.filter(Q(sender=user) | Q(receiver=user))
        .select_related("sender", "receiver")
        .order_by("-created_at", "-id")
    )
    for message in messages.iterator():
        contact_id = (
            message.receiver_id if message.sender_id == user.pk else message.sender_id
        )
        latest.setdefault(contact_id, message)

    summaries = []
    for contact_id, message in latest.items():
        contact = message.receiver if message.sender_id == user.pk else message.sender
        summaries.append(
            ConversationSummary(
                conversation_id=message.conversation_id,
                contact=contact,
                last_message=message,
                unread_count=unread_by_sender.get(contact_id, 0),
            )
        )
    return summaries
