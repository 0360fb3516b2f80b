from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from vibesync.users.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    fieldsets = (
        *BaseUserAdmin.fieldsets,
        (
            _("Profile"),
            {"fields": ("name", "user_type", "profile_image_url", "language")},
        ),
    )
    list_display = ["username", "email", "name", "user_type", "is_superuser"]
    search_fields = ["username", "email", "name"]
    list_filter = ["user_type", "is_staff", "is_active"]
