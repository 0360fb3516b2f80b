from __future__ import annotations

from django.contrib.auth import get_user_model
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from vibesync.messaging.models import Message

User = get_user_model()

MAX_MESSAGE_LENGTH = 5000


class ContactSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="display_name", read_only=True)

    class Meta:
        model = User
        fields = ("id", "name", "user_type", "profile_image_url")
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    conversation_id = serializers.CharField(read_only=True)
    sender = ContactSerializer(read_only=True)

    class Meta:
        model = Message
        fields = (
            "id",
            "conversation_id",
            "sender",
            "receiver",
            "content",
            "is_read",
            "created_at",
        )
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    receiver = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True)
    )
    content = serializers.CharField(max_length=MAX_MESSAGE_LENGTH, trim_whitespace=True)

    def validate_receiver(self, value):
        request = self.context.get("request")
        if request is not None and value.pk == request.user.pk:
            msg = _("You cannot send a message to yourself.")
            raise serializers.ValidationError(msg)
        return value


class LastMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Message
        fields = ("id", "content", "sender", "created_at")
        read_only_fields = fields


class ConversationSummarySerializer(serializers.Serializer):
    id = serializers.CharField(source="conversation_id")
    contact = ContactSerializer()
    last_message = LastMessageSerializer()
    unread_count = serializers.IntegerField()
