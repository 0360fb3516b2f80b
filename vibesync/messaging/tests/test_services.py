from datetime import timedelta

import pytest
from django.utils import timezone

from tests.factories import create_message
from vibesync.messaging import services
from vibesync.messaging.conversations import conversation_id_for
from vibesync.messaging.models import Message

pytestmark = pytest.mark.django_db


def test_send_message_strips_content(user, other_user):
    message = services.send_message(user, other_user, "  hello  ")

    assert message.content == "hello"
    assert message.is_read is False
    assert message.conversation_id == conversation_id_for(user.pk, other_user.pk)


def test_send_message_rejects_empty_content(user, other_user):
    with pytest.raises(ValueError, match="empty"):
        services.send_message(user, other_user, "   ")
    assert not Message.objects.exists()


def test_send_message_rejects_self(user):
    with pytest.raises(ValueError, match="yourself"):
        services.send_message(user, user, "hi")


def test_conversation_messages_newest_first(user, other_user, third_user):
    first = create_message(user, other_user, "first")
    second = create_message(other_user, user, "second")
    create_message(user, third_user, "elsewhere")
    Message.objects.filter(pk=first.pk).update(
        created_at=timezone.now() - timedelta(minutes=5)
    )

    cid = conversation_id_for(user.pk, other_user.pk)
    assert [m.pk for m in services.conversation_messages(cid)] == [second.pk, first.pk]


def test_mark_conversation_read_only_touches_received(user, other_user, third_user):
    create_message(other_user, user, "one")
    create_message(other_user, user, "two")
    mine = create_message(user, other_user, "mine")
    elsewhere = create_message(third_user, user, "other thread")

    cid = conversation_id_for(user.pk, other_user.pk)
    assert services.mark_conversation_read(cid, user.pk) == 2  # noqa: PLR2004
    assert services.mark_conversation_read(cid, user.pk) == 0

    mine.refresh_from_db()
    elsewhere.refresh_from_db()
    assert mine.is_read is False
    assert elsewhere.is_read is False
    assert services.unread_count(user.pk) == 1


def test_mark_message_read(user, other_user):
    message = create_message(other_user, user)

    assert services.mark_message_read(message) is True
    assert services.mark_message_read(message) is False
    message.refresh_from_db()
    assert message.is_read is True


def test_unread_count(user, other_user, third_user):
    create_message(other_user, user)
    create_message(third_user, user)
    create_message(third_user, user, is_read=True)
    create_message(user, other_user)

    assert services.unread_count(user.pk) == 2  # noqa: PLR2004
    assert services.unread_count(other_user.pk) == 1


def test_conversation_summaries(user, other_user, third_user):
    old = create_message(user, other_user, "old")
    Message.objects.filter(pk=old.pk).update(
        created_at=timezone.now() - timedelta(hours=1)
    )
    latest_with_bob = create_message(other_user, user, "latest")
    create_message(third_user, user, "from carol")
    Message.objects.filter(receiver=user, sender=third_user).update(
        created_at=timezone.now() - timedelta(minutes=30)
    )

    summaries = services.conversation_summaries(user)

    assert [s.contact.pk for s in summaries] == [other_user.pk, third_user.pk]
    bob = summaries[0]
    assert bob.conversation_id == conversation_id_for(user.pk, other_user.pk)
    assert bob.last_message.pk == latest_with_bob.pk
    assert bob.unread_count == 1
    assert summaries[1].unread_count == 1


def test_conversation_summaries_empty(user):
    assert services.conversation_summaries(user) == []
