import django.db.models.deletion
from django.conf import settings
from django.db import migrations
from django.db import models


def _flag(default):
    return models.BooleanField(default=default)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "notification_type",
                    models.CharField(
                        choices=[
                            ("message", "Message"),
                            ("like", "Like"),
                            ("comment", "Comment"),
                            ("feedback", "Feedback"),
                            ("connection", "Connection"),
                            ("application_received", "Application Received"),
                            ("application_accepted", "Application Accepted"),
                            ("application_rejected", "Application Rejected"),
                        ],
                        max_length=50,
                    ),
                ),
                ("title", models.CharField(max_length=300)),
                ("message", models.TextField()),
                (
                    "related_id",
                    models.CharField(blank=True, default="", max_length=64),
                ),
                ("is_read", models.BooleanField(default=False)),
                ("is_email_sent", models.BooleanField(default=False)),
                ("is_push_sent", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "recipient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "related_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="NotificationPreference",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("message_in_app", _flag(True)),
                ("message_email", _flag(False)),
                ("message_push", _flag(False)),
                ("like_in_app", _flag(True)),
                ("like_email", _flag(False)),
                ("like_push", _flag(False)),
                ("comment_in_app", _flag(True)),
                ("comment_email", _flag(False)),
                ("comment_push", _flag(False)),
                ("feedback_in_app", _flag(True)),
                ("feedback_email", _flag(False)),
                ("feedback_push", _flag(False)),
                ("connection_in_app", _flag(True)),
                ("connection_email", _flag(False)),
                ("connection_push", _flag(False)),
                ("application_in_app", _flag(True)),
                ("application_email", _flag(False)),
                ("application_push", _flag(False)),
                ("weekly_digest", _flag(True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notification_preferences",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
    ]
