from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    class Type(models.TextChoices):
        MESSAGE = "message", _("Message")
        LIKE = "like", _("Like")
        COMMENT = "comment", _("Comment")
        FEEDBACK = "feedback", _("Feedback")
        CONNECTION = "connection", _("Connection")
        APPLICATION_RECEIVED = "application_received", _("Application Received")
        APPLICATION_ACCEPTED = "application_accepted", _("Application Accepted")
        APPLICATION_REJECTED = "application_rejected", _("Application Rejected")

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    notification_type = models.CharField(max_length=50, choices=Type.choices)
    title = models.CharField(max_length=300)
    message = models.TextField()
    # Id of the post, comment, project or user the notification is about.
    related_id = models.CharField(max_length=64, blank=True, default="")
    related_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    is_read = models.BooleanField(default=False)
    is_email_sent = models.BooleanField(default=False)
    is_push_sent = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.title} - {self.recipient}"

    @property
    def category(self) -> str:
        """Preference category (application_* types share one switch)."""
        if self.notification_type.startswith("application_"):
            return "application"
        return self.notification_type


class NotificationPreference(models.Model):
    CATEGORIES = ("message", "like", "comment", "feedback", "connection", "application")
    CHANNELS = ("in_app", "email", "push")

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notification_preferences",
    )
    message_in_app = models.BooleanField(default=True)
    message_email = models.BooleanField(default=False)
    message_push = models.BooleanField(default=False)
    like_in_app = models.BooleanField(default=True)
    like_email = models.BooleanField(default=False)
    like_push = models.BooleanField(default=False)
    comment_in_app = models.BooleanField(default=True)
    comment_email = models.BooleanField(default=False)
    comment_push = models.BooleanField(default=False)
    feedback_in_app = models.BooleanField(default=True)
    feedback_email = models.BooleanField(default=False)
    feedback_push = models.BooleanField(default=False)
    connection_in_app = models.BooleanField(default=True)
    connection_email = models.BooleanField(default=False)
    connection_push = models.BooleanField(default=False)
    application_in_app = models.BooleanField(default=True)
    application_email = models.BooleanField(default=False)
    application_push = models.BooleanField(default=False)
    weekly_digest = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"NotificationPreference({self.user_id})"

    def allows(self, category: str, channel: str) -> bool:
        if category not in self.CATEGORIES:
            # Unknown categories only ever show up in-app.
            return channel == "in_app"
        return bool(getattr(self, f"{category}_{channel}"))
