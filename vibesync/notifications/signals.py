from django.db.models.signals import post_save
from django.db.transaction import on_commit
from django.dispatch import receiver

from .models import Notification
from .services import deliver_notification


@receiver(post_save, sender=Notification)
def send_notification(sender, instance, created, **kwargs):
    if created:
        on_commit(lambda: deliver_notification(instance))
