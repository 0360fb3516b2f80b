from unittest import mock

import pytest

from tests.factories import create_message
from vibesync.notifications.services import create_notification
from vibesync.realtime import constants as events
from vibesync.realtime import socketio as realtime_socketio
from vibesync.realtime.events.messages import build_message_payload
from vibesync.realtime.events.messages import publish_message_created
from vibesync.realtime.events.messages import publish_messages_read
from vibesync.realtime.events.notifications import build_notification_payload
from vibesync.realtime.events.notifications import publish_notification_created
from vibesync.realtime.events.unread import build_unread_payload
from vibesync.realtime.router import RoomRouter
from vibesync.realtime.router import room_for_conversation

from .fakes import RecordingEmitter


@pytest.fixture
def emitter(monkeypatch):
    """Swap the process-wide router for one that records deliveries."""
    recorder = RecordingEmitter()
    monkeypatch.setattr(realtime_socketio, "router", RoomRouter(recorder))
    return recorder


def test_emit_event_to_user_from_sync_code(emitter):
    realtime_socketio.router.bind_user("tab-a", 1)
    realtime_socketio.router.bind_user("tab-b", 1)

    delivered = realtime_socketio.emit_event_to_user(1, events.NOTIFICATION, {"id": 9})

    assert delivered == 2  # noqa: PLR2004
    assert sorted(target for target, _, _ in emitter.sent) == ["tab-a", "tab-b"]


def test_emit_event_to_conversation_from_sync_code(emitter):
    realtime_socketio.router.bind_user("s1", 1)
    realtime_socketio.router.join(room_for_conversation("1-2"), "s1")

    delivered = realtime_socketio.emit_event_to_conversation(
        "1-2", events.NEW_MESSAGE, {"id": 1}
    )

    assert delivered == 1
    assert emitter.to("s1") == [(events.NEW_MESSAGE, {"id": 1})]


def test_emit_without_connections_is_a_noop(emitter):
    assert realtime_socketio.emit_event_to_user(1, events.NOTIFICATION, {}) == 0
    assert emitter.sent == []


@pytest.mark.django_db
def test_build_message_payload(user, other_user):
    message = create_message(user, other_user, "hello")

    payload = build_message_payload(message)

    assert payload == {
        "id": message.id,
        "conversationId": message.conversation_id,
        "senderId": user.pk,
        "receiverId": other_user.pk,
        "content": "hello",
        "isRead": False,
        "createdAt": message.created_at.isoformat(),
    }


@pytest.mark.django_db
def test_publish_message_created_reaches_room_and_receiver(user, other_user, emitter):
    message = create_message(user, other_user, "hello")
    router = realtime_socketio.router
    router.bind_user("sender-tab", user.pk)
    router.bind_user("receiver-tab", other_user.pk)
    router.join(room_for_conversation(message.conversation_id), "sender-tab")

    publish_message_created(message)

    assert emitter.to("sender-tab") == [
        (events.NEW_MESSAGE, build_message_payload(message))
    ]
    # The receiver has not opened the conversation, only its counters move.
    assert emitter.to("receiver-tab") == [
        (events.UNREAD_COUNT, {"messages": 1, "notifications": 1})
    ]


@pytest.mark.django_db
def test_publish_messages_read(user, other_user):
    with (
        mock.patch(
            "vibesync.realtime.events.messages.emit_event_to_conversation"
        ) as emit,
        mock.patch(
            "vibesync.realtime.events.messages.publish_unread_counts"
        ) as unread,
    ):
        publish_messages_read("1-2", 2)

    emit.assert_called_once_with(
        "1-2", events.MESSAGES_READ, {"userId": 2, "conversationId": "1-2"}
    )
    unread.assert_called_once_with(2)


@pytest.mark.django_db
def test_build_unread_payload(user, other_user):
    create_message(other_user, user)
    create_message(other_user, user, is_read=True)

    # One notification per message sent to the user.
    assert build_unread_payload(user.pk) == {"messages": 1, "notifications": 2}
    assert build_unread_payload(other_user.pk) == {"messages": 0, "notifications": 0}


@pytest.mark.django_db
def test_publish_notification_created(user, other_user, emitter):
    notification = create_notification(
        user,
        "like",
        "Post Liked",
        "Your post was liked by Bob",
        related_id=5,
        related_user=other_user,
    )
    realtime_socketio.router.bind_user("tab", user.pk)

    publish_notification_created(notification)

    payload = build_notification_payload(notification)
    assert payload["type"] == "like"
    assert payload["relatedId"] == "5"
    assert payload["relatedUserId"] == other_user.pk
    assert payload["isRead"] is False
    assert emitter.to("tab") == [
        (events.NOTIFICATION, payload),
        (events.UNREAD_COUNT, {"messages": 0, "notifications": 1}),
    ]
