from __future__ import annotations

from rest_framework import serializers

from vibesync.notifications.models import Notification
from vibesync.notifications.models import NotificationPreference


class NotificationSerializer(serializers.ModelSerializer):
    """Read serializer for notifications."""

    unread = serializers.SerializerMethodField()
    related_user_name = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = (
            "id",
            "recipient",
            "notification_type",
            "title",
            "message",
            "related_id",
            "related_user",
            "related_user_name",
            "is_read",
            "unread",
            "created_at",
        )
        read_only_fields = fields

    def get_unread(self, obj: Notification) -> bool:
        return not bool(obj.is_read)

    def get_related_user_name(self, obj: Notification) -> str | None:
        if obj.related_user is None:
            return None
        return obj.related_user.display_name


class NotificationPreferenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = NotificationPreference
        exclude = ("id", "user", "created_at")
        read_only_fields = ("updated_at",)
