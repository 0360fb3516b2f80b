from __future__ import annotations

from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import inline_serializer
from rest_framework import mixins
from rest_framework import serializers
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from vibesync.notifications.models import Notification
from vibesync.notifications.models import NotificationPreference
from vibesync.realtime.events.unread import publish_unread_counts

from .serializers import NotificationPreferenceSerializer
from .serializers import NotificationSerializer


class NotificationViewSet(
    mixins.ListModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    """Notifications for the authenticated user.

    - list: shows request.user's notifications, newest first
    - destroy: deletes a notification (recipient only)
    - unread_count / mark_read / mark_all_read
    - preferences: read or update delivery preferences
    """

    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer

    def get_queryset(self):
        return Notification.objects.filter(
            recipient=self.request.user
        ).select_related("related_user")

    @extend_schema(
        responses=inline_serializer(
            "NotificationUnreadCount", {"count": serializers.IntegerField()}
        )
    )
    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        count = self.get_queryset().filter(is_read=False).count()
        return Response({"count": count})

    @action(detail=True, methods=["post"], url_path="mark-read")
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read"])
            publish_unread_counts(request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"], url_path="mark-all-read")
    def mark_all_read(self, request):
        if self.get_queryset().filter(is_read=False).update(is_read=True):
            publish_unread_counts(request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        request=NotificationPreferenceSerializer,
        responses=NotificationPreferenceSerializer,
    )
    @action(detail=False, methods=["get", "put", "patch"], url_path="preferences")
    def preferences(self, request):
        prefs, _ = NotificationPreference.objects.get_or_create(user=request.user)
        if request.method == "GET":
            return Response(NotificationPreferenceSerializer(prefs).data)
        serializer = NotificationPreferenceSerializer(
            prefs,
            data=request.data,
            partial=request.method == "PATCH",
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
