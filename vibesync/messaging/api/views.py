"""Direct messages and conversations.

Messages are created over REST; realtime delivery (``new-message``) happens in
``vibesync.messaging.signals`` once the row is committed.
"""

from __future__ import annotations

from django.db.models import Q
from django.http import Http404
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import inline_serializer
from rest_framework import mixins
from rest_framework import serializers
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from vibesync.messaging import services
from vibesync.messaging.conversations import CONVERSATION_ID_PATTERN
from vibesync.messaging.conversations import is_participant
from vibesync.messaging.models import Message
from vibesync.realtime.events.messages import publish_messages_read

from .serializers import ConversationSummarySerializer
from .serializers import MessageCreateSerializer
from .serializers import MessageSerializer

UnreadCountSerializer = inline_serializer(
    "MessageUnreadCount", {"count": serializers.IntegerField()}
)
MarkReadSerializer = inline_serializer(
    "ConversationMarkRead", {"updated": serializers.IntegerField()}
)


class MessageViewSet(mixins.CreateModelMixin, GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = MessageSerializer

    def get_queryset(self):
        user = self.request.user
        return Message.objects.filter(Q(sender=user) | Q(receiver=user))

    @extend_schema(request=MessageCreateSerializer, responses=MessageSerializer)
    def create(self, request, *args, **kwargs):
        serializer = MessageCreateSerializer(
            data=request.data, context={"request": request}
        )
        serializer.is_valid(raise_exception=True)
        try:
            message = services.send_message(
                request.user,
                serializer.validated_data["receiver"],
                serializer.validated_data["content"],
            )
        except ValueError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc
        out = MessageSerializer(message, context={"request": request}).data
        return Response(out, status=status.HTTP_201_CREATED)

    @extend_schema(responses=UnreadCountSerializer)
    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        return Response({"count": services.unread_count(request.user.pk)})

    @action(detail=True, methods=["post"], url_path="mark-read")
    def mark_read(self, request, pk=None):
        message = self.get_object()
        if message.receiver_id != request.user.pk:
            raise Http404
        if services.mark_message_read(message):
            publish_messages_read(message.conversation_id, request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ConversationViewSet(GenericViewSet):
    """Conversations of the authenticated user, keyed by ``<low id>-<high id>``."""

    permission_classes = [IsAuthenticated]
    serializer_class = MessageSerializer
    lookup_value_regex = CONVERSATION_ID_PATTERN

    def get_queryset(self):
        return Message.objects.none()

    def _conversation_id(self, pk: str) -> str:
        if not is_participant(pk, self.request.user.pk):
            raise Http404
        return pk

    @extend_schema(responses=ConversationSummarySerializer(many=True))
    def list(self, request):
        summaries = services.conversation_summaries(request.user)
        data = ConversationSummarySerializer(
            summaries, many=True, context={"request": request}
        ).data
        return Response(data)

    @extend_schema(responses=MessageSerializer(many=True))
    @action(detail=True, methods=["get"])
    def messages(self, request, pk=None):
        conversation_id = self._conversation_id(pk)
        queryset = services.conversation_messages(conversation_id)
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = MessageSerializer(page, many=True, context={"request": request})
            return self.get_paginated_response(serializer.data)
        serializer = MessageSerializer(queryset, many=True, context={"request": request})
        return Response(serializer.data)

    @extend_schema(request=None, responses=MarkReadSerializer)
    @action(detail=True, methods=["post"], url_path="mark-read")
    def mark_read(self, request, pk=None):
        conversation_id = self._conversation_id(pk)
        updated = services.mark_conversation_read(conversation_id, request.user.pk)
        publish_messages_read(conversation_id, request.user.pk)
        return Response({"updated": updated})
