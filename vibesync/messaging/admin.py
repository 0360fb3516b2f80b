from django.contrib import admin

from vibesync.messaging import models


@admin.register(models.Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ["id", "sender", "receiver", "content", "is_read", "created_at"]
    search_fields = ["content", "sender__email", "receiver__email"]
    list_filter = ["is_read", "created_at"]
    raw_id_fields = ["sender", "receiver"]
