from django.contrib import admin

from vibesync.notifications import models


@admin.register(models.Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["id", "recipient", "title", "message", "notification_type"]
    search_fields = ["title", "message", "notification_type", "related_id"]
    list_filter = ["notification_type", "is_read", "is_email_sent", "created_at"]
    raw_id_fields = ["recipient", "related_user"]


@admin.register(models.NotificationPreference)
class NotificationPreferenceAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "weekly_digest", "updated_at"]
    search_fields = ["user__email", "user__username"]
    list_filter = ["weekly_digest"]
