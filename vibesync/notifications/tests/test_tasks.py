from datetime import timedelta

import pytest
from django.utils import timezone

from tests.factories import create_user
from vibesync.notifications.models import Notification
from vibesync.notifications.models import NotificationPreference
from vibesync.notifications.services import create_notification
from vibesync.notifications.tasks import send_notification_email
from vibesync.notifications.tasks import send_weekly_digests

pytestmark = pytest.mark.django_db


def test_send_notification_email(user, mailoutbox):
    notification = create_notification(
        user, Notification.Type.FEEDBACK, "New Feedback Received", "Well done"
    )

    assert send_notification_email(notification.pk) is True

    assert len(mailoutbox) == 1
    email = mailoutbox[0]
    assert email.subject == "New Feedback Received"
    assert email.body == "Well done"
    assert "Well done" in email.alternatives[0][0]
    notification.refresh_from_db()
    assert notification.is_email_sent is True


def test_send_notification_email_skips_missing(mailoutbox):
    assert send_notification_email(999999) is False
    assert mailoutbox == []


def test_send_notification_email_skips_users_without_email(mailoutbox):
    user = create_user("noemail", email="")
    notification = create_notification(
        user, Notification.Type.LIKE, "Post Liked", "Your post was liked"
    )

    assert send_notification_email(notification.pk) is False
    assert mailoutbox == []


def test_weekly_digest(user, other_user, mailoutbox):
    create_notification(user, Notification.Type.LIKE, "Post Liked", "by Bob")
    create_notification(user, Notification.Type.COMMENT, "New Comment", "Nice")
    stale = create_notification(user, Notification.Type.LIKE, "Old", "old news")
    Notification.objects.filter(pk=stale.pk).update(
        created_at=timezone.now() - timedelta(days=10)
    )

    assert send_weekly_digests() == 1

    assert len(mailoutbox) == 1
    email = mailoutbox[0]
    assert email.subject == "Your Weekly VibeSync Digest"
    assert email.to == [user.email]
    assert "Post Liked: by Bob" in email.body
    assert "New Comment: Nice" in email.body
    assert "old news" not in email.body


def test_weekly_digest_respects_opt_out(user, other_user, mailoutbox):
    NotificationPreference.objects.create(user=user, weekly_digest=False)
    create_notification(user, Notification.Type.LIKE, "Post Liked", "by Bob")
    create_notification(other_user, Notification.Type.LIKE, "Post Liked", "by Alice")

    assert send_weekly_digests() == 1
    assert mailoutbox[0].to == [other_user.email]


def test_weekly_digest_window_end(user, mailoutbox):
    create_notification(user, Notification.Type.LIKE, "Post Liked", "by Bob")
    past = (timezone.now() - timedelta(days=8)).isoformat()

    assert send_weekly_digests(past) == 0
    assert mailoutbox == []


def test_weekly_digest_accepts_naive_and_offset_datetimes(user, mailoutbox):
    create_notification(user, Notification.Type.LIKE, "Post Liked", "by Bob")
    later = timezone.now() + timedelta(minutes=1)

    naive = timezone.make_naive(later).isoformat()
    assert send_weekly_digests(naive) == 1
    assert send_weekly_digests(later.isoformat()) == 1
    assert len(mailoutbox) == 2


@pytest.mark.parametrize("value", ["next tuesday", "2024-13-45T00:00:00"])
def test_weekly_digest_rejects_malformed_datetime(value, mailoutbox):
    with pytest.raises(ValueError):
        send_weekly_digests(value)
    assert mailoutbox == []
