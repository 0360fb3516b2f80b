"""Creating and delivering notifications.

Creation only persists the row; delivery happens after the transaction
commits (see ``signals``) and honours the recipient's preferences per channel:

- in-app: realtime ``notification`` push to every open tab
- email: rendered and sent by a Celery task
- push: no provider is wired yet, the row is only flagged as sent
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vibesync.notifications.models import Notification
from vibesync.notifications.models import NotificationPreference
from vibesync.notifications.tasks import send_notification_email
from vibesync.realtime.events.notifications import publish_notification_created

if TYPE_CHECKING:  # import for type checking only
    from vibesync.messaging.models import Message
    from vibesync.users.models import User

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 100


def excerpt(text: str, length: int = EXCERPT_LENGTH) -> str:
    text = text or ""
    if len(text) > length:
        return f"{text[:length]}..."
    return text


def preferences_for(user_id: int) -> NotificationPreference:
    """Stored preferences, or unsaved defaults for users who never set any."""
    prefs = NotificationPreference.objects.filter(user_id=user_id).first()
    return prefs or NotificationPreference(user_id=user_id)


def create_notification(  # noqa: PLR0913
    recipient: User,
    notification_type: str,
    title: str,
    message: str,
    *,
    related_id: str | int = "",
    related_user: User | None = None,
) -> Notification:
    return Notification.objects.create(
        recipient=recipient,
        notification_type=notification_type,
        title=title,
        message=message,
        related_id=str(related_id),
        related_user=related_user,
    )


def deliver_notification(notification: Notification) -> dict[str, bool]:
    prefs = preferences_for(notification.recipient_id)
    category = notification.category
    sent = {"in_app": False, "email": False, "push": False}

    if prefs.allows(category, "in_app"):
        publish_notification_created(notification)
        sent["in_app"] = True

    if prefs.allows(category, "email"):
        send_notification_email.delay(notification.id)
        sent["email"] = True

    if prefs.allows(category, "push"):
        Notification.objects.filter(pk=notification.pk).update(is_push_sent=True)
        sent["push"] = True

    logger.debug("Delivered notification %s via %s", notification.pk, sent)
    return sent


def _first_name(user: User | None) -> str:
    return (getattr(user, "first_name", "") or "").strip() or "someone"


def _is_self(recipient: User, actor: User) -> bool:
    return recipient.pk == actor.pk


def notify_new_message(message: Message) -> Notification:
    return create_notification(
        message.receiver,
        Notification.Type.MESSAGE,
        "New Message",
        (
            f"You have a new message from {_first_name(message.sender)}: "
            f"{excerpt(message.content)}"
        ),
        related_id=message.sender_id,
        related_user=message.sender,
    )


def notify_post_liked(owner: User, liker: User, post_id) -> Notification | None:
    if _is_self(owner, liker):
        return None
    return create_notification(
        owner,
        Notification.Type.LIKE,
        "Post Liked",
        f"Your post was liked by {_first_name(liker)}",
        related_id=post_id,
        related_user=liker,
    )


def notify_comment_liked(owner: User, liker: User, comment_id) -> Notification | None:
    if _is_self(owner, liker):
        return None
    return create_notification(
        owner,
        Notification.Type.LIKE,
        "Comment Liked",
        f"Your comment was liked by {_first_name(liker)}",
        related_id=comment_id,
        related_user=liker,
    )


def notify_project_liked(owner: User, liker: User, project_id) -> Notification | None:
    if _is_self(owner, liker):
        return None
    return create_notification(
        owner,
        Notification.Type.LIKE,
        "Project Liked",
        f"Your project was liked by {_first_name(liker)}",
        related_id=project_id,
        related_user=liker,
    )


def notify_post_commented(
    owner: User,
    commenter: User,
    post_id,
    content: str,
) -> Notification | None:
    if _is_self(owner, commenter):
        return None
    return create_notification(
        owner,
        Notification.Type.COMMENT,
        "New Comment",
        f"Your post was commented on by {_first_name(commenter)}: {excerpt(content)}",
        related_id=post_id,
        related_user=commenter,
    )


def notify_feedback_received(
    user: User,
    giver: User,
    rating: int,
    comment: str = "",
) -> Notification:
    message = f"You received feedback from {_first_name(giver)} with rating {rating}"
    if comment:
        message = f'{message}: "{excerpt(comment)}"'
    return create_notification(
        user,
        Notification.Type.FEEDBACK,
        "New Feedback Received",
        message,
        related_id=giver.pk,
        related_user=giver,
    )
