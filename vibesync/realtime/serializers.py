"""Validation of client event payloads.

Field names follow the wire format used by the web client (camelCase).
"""

from __future__ import annotations

from rest_framework import serializers

from vibesync.messaging.conversations import InvalidConversationId
from vibesync.messaging.conversations import participants


class AuthenticateEventSerializer(serializers.Serializer):
    token = serializers.CharField(required=False, allow_blank=False)
    userId = serializers.IntegerField(required=False, min_value=1)  # noqa: N815

    def validate(self, attrs):
        if "token" not in attrs and "userId" not in attrs:
            msg = "Provide a token or a user id."
            raise serializers.ValidationError(msg)
        return attrs


class ConversationEventSerializer(serializers.Serializer):
    conversationId = serializers.CharField()  # noqa: N815
    userId = serializers.IntegerField(required=False, allow_null=True, min_value=1)  # noqa: N815

    def validate_conversationId(self, value: str) -> str:  # noqa: N802
        try:
            participants(value)
        except InvalidConversationId as exc:
            raise serializers.ValidationError(str(exc)) from exc
        return value.strip()


class TypingEventSerializer(ConversationEventSerializer):
    isTyping = serializers.BooleanField()  # noqa: N815


class CallSignalSerializer(serializers.Serializer):
    to = serializers.IntegerField(min_value=1)
    callId = serializers.CharField(max_length=128)  # noqa: N815


class CallOfferSerializer(CallSignalSerializer):
    offer = serializers.DictField()


class CallAnswerSerializer(CallSignalSerializer):
    answer = serializers.DictField()


class IceCandidateSerializer(CallSignalSerializer):
    candidate = serializers.DictField()
