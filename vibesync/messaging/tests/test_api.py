import pytest
from django.urls import resolve
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from tests.factories import api_client_for
from tests.factories import create_message
from vibesync.messaging.conversations import conversation_id_for
from vibesync.messaging.models import Message

pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def published_reads(monkeypatch):
    published = []
    monkeypatch.setattr(
        "vibesync.messaging.api.views.publish_messages_read",
        lambda cid, reader_id: published.append((cid, reader_id)),
    )
    return published


def test_conversation_urls():
    assert reverse("api_v1:conversations-list") == "/api/v1/conversations/"
    assert (
        reverse("api_v1:conversations-messages", kwargs={"pk": "3-7"})
        == "/api/v1/conversations/3-7/messages/"
    )
    assert (
        resolve("/api/v1/conversations/3-7/mark-read/").view_name
        == "api_v1:conversations-mark-read"
    )
    assert reverse("api_v1:messages-unread-count") == "/api/v1/messages/unread-count/"


def test_requires_authentication():
    resp = APIClient().get("/api/v1/conversations/")
    assert resp.status_code == status.HTTP_401_UNAUTHORIZED


def test_send_message(api_client, user, other_user):
    resp = api_client.post(
        "/api/v1/messages/",
        {"receiver": other_user.pk, "content": "hey"},
        format="json",
    )

    assert resp.status_code == status.HTTP_201_CREATED, resp.content
    assert resp.data["content"] == "hey"
    assert resp.data["sender"]["id"] == user.pk
    assert resp.data["conversation_id"] == conversation_id_for(user.pk, other_user.pk)
    assert Message.objects.filter(sender=user, receiver=other_user).count() == 1


def test_send_message_to_self_is_rejected(api_client, user):
    resp = api_client.post(
        "/api/v1/messages/",
        {"receiver": user.pk, "content": "me"},
        format="json",
    )
    assert resp.status_code == status.HTTP_400_BAD_REQUEST


def test_send_blank_message_is_rejected(api_client, other_user):
    resp = api_client.post(
        "/api/v1/messages/",
        {"receiver": other_user.pk, "content": "   "},
        format="json",
    )
    assert resp.status_code == status.HTTP_400_BAD_REQUEST
    assert not Message.objects.exists()


def test_unread_count(api_client, user, other_user):
    create_message(other_user, user)
    create_message(other_user, user, is_read=True)

    resp = api_client.get("/api/v1/messages/unread-count/")
    assert resp.data == {"count": 1}


def test_mark_single_message_read(api_client, user, other_user, published_reads):
    message = create_message(other_user, user)

    resp = api_client.post(f"/api/v1/messages/{message.pk}/mark-read/")

    assert resp.status_code == status.HTTP_204_NO_CONTENT
    message.refresh_from_db()
    assert message.is_read is True
    assert published_reads == [(message.conversation_id, user.pk)]


def test_sender_cannot_mark_message_read(user, other_user):
    message = create_message(user, other_user)

    resp = api_client_for(user).post(f"/api/v1/messages/{message.pk}/mark-read/")

    assert resp.status_code == status.HTTP_404_NOT_FOUND
    message.refresh_from_db()
    assert message.is_read is False


def test_list_conversations(api_client, user, other_user):
    create_message(user, other_user, "hello")
    create_message(other_user, user, "hi back")

    resp = api_client.get("/api/v1/conversations/")

    assert resp.status_code == status.HTTP_200_OK
    assert len(resp.data) == 1
    summary = resp.data[0]
    assert summary["id"] == conversation_id_for(user.pk, other_user.pk)
    assert summary["contact"]["id"] == other_user.pk
    assert summary["contact"]["name"] == "Bob"
    assert summary["last_message"]["content"] == "hi back"
    assert summary["unread_count"] == 1


def test_conversation_messages_are_paginated(api_client, user, other_user):
    for i in range(3):
        create_message(user, other_user, f"m{i}")
    cid = conversation_id_for(user.pk, other_user.pk)

    resp = api_client.get(f"/api/v1/conversations/{cid}/messages/")

    assert resp.status_code == status.HTTP_200_OK
    assert resp.data["count"] == 3  # noqa: PLR2004
    assert {m["content"] for m in resp.data["results"]} == {"m0", "m1", "m2"}


def test_outsider_cannot_read_conversation(user, other_user, third_user):
    create_message(user, other_user, "private")
    cid = conversation_id_for(user.pk, other_user.pk)

    resp = api_client_for(third_user).get(f"/api/v1/conversations/{cid}/messages/")

    assert resp.status_code == status.HTTP_404_NOT_FOUND


def test_mark_conversation_read(api_client, user, other_user, published_reads):
    create_message(other_user, user)
    create_message(other_user, user)
    cid = conversation_id_for(user.pk, other_user.pk)

    resp = api_client.post(f"/api/v1/conversations/{cid}/mark-read/")

    assert resp.status_code == status.HTTP_200_OK
    assert resp.data == {"updated": 2}
    assert published_reads == [(cid, user.pk)]
    assert not Message.objects.filter(receiver=user, is_read=False).exists()


def test_non_canonical_conversation_id_is_not_found(api_client, user, other_user):
    low, high = sorted((user.pk, other_user.pk))
    resp = api_client.post(f"/api/v1/conversations/{high}-{low}/mark-read/")
    assert resp.status_code == status.HTTP_404_NOT_FOUND
