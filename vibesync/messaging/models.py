from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from vibesync.messaging.conversations import conversation_id_for


class Message(models.Model):
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
    )
    content = models.TextField(_("Content"))
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["receiver", "is_read"], name="messaging_m_receive_6b1f0e_idx"
            ),
            models.Index(
                fields=["sender", "receiver", "created_at"],
                name="messaging_m_sender__c3d9a2_idx",
            ),
        ]

    def __str__(self):
        return f"{self.sender_id} -> {self.receiver_id}: {self.content[:30]}"

    @property
    def conversation_id(self) -> str:
        return conversation_id_for(self.sender_id, self.receiver_id)
