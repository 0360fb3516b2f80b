from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from vibesync.notifications.models import Notification

logger = logging.getLogger(__name__)

DIGEST_PERIOD = timedelta(days=7)


@shared_task(name="notifications.send_email")
def send_notification_email(notification_id: int) -> bool:
    """Email a single notification to its recipient.

    Returns False when the notification is gone or the recipient has no email.
    """
    notification = (
        Notification.objects.select_related("recipient")
        .filter(pk=notification_id)
        .first()
    )
    if notification is None or not notification.recipient.email:
        return False

    context = {
        "notification": notification,
        "user": notification.recipient,
        "app_url": settings.APP_URL,
    }
    send_mail(
        subject=notification.title,
        message=notification.message,
        from_email=None,
        recipient_list=[notification.recipient.email],
        html_message=render_to_string("notifications/email/notification.html", context),
    )
    Notification.objects.filter(pk=notification.pk).update(is_email_sent=True)
    return True


@shared_task(name="notifications.weekly_digest")
def send_weekly_digests(now_iso: str | None = None) -> int:
    """Email last week's notifications to every user with the digest enabled.

    Args:
        now_iso: ISO datetime marking the end of the digest window. Defaults to now.

    Returns:
        Number of digests sent.
    """
    now = parse_datetime(now_iso) if now_iso else timezone.now()
    if now is None:
        msg = f"Not an ISO datetime: {now_iso!r}"
        raise ValueError(msg)
    if timezone.is_naive(now):
        now = timezone.make_aware(now)
    since = now - DIGEST_PERIOD

    users = (
        get_user_model()
        .objects.filter(is_active=True, notifications__created_at__gte=since)
        .exclude(email="")
        # Users without stored preferences get the digest by default.
        .exclude(notification_preferences__weekly_digest=False)
        .distinct()
    )
    sent = 0
    for user in users.iterator():
        notifications = list(
            Notification.objects.filter(
                recipient=user,
                created_at__gte=since,
                created_at__lte=now,
            )
        )
        if not notifications:
            continue
        context = {
            "user": user,
            "notifications": notifications,
            "app_url": settings.APP_URL,
        }
        send_mail(
            subject="Your Weekly VibeSync Digest",
            message=render_to_string("notifications/email/weekly_digest.txt", context),
            from_email=None,
            recipient_list=[user.email],
            html_message=render_to_string(
                "notifications/email/weekly_digest.html", context
            ),
        )
        sent += 1
    logger.info("Sent %s weekly digests", sent)
    return sent
