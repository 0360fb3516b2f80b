from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class MessagingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "vibesync.messaging"
    verbose_name = _("Messaging")

    def ready(self):
        import vibesync.messaging.signals  # noqa: F401, PLC0415
