from django.db.models.signals import post_save
from django.db.transaction import on_commit
from django.dispatch import receiver

from vibesync.notifications.services import notify_new_message
from vibesync.realtime.events.messages import publish_message_created

from .models import Message


@receiver(post_save, sender=Message)
def announce_new_message(sender, instance, created, **kwargs):
    if not created:
        return
    on_commit(lambda: publish_message_created(instance))
    notify_new_message(instance)
