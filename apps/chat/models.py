"""Chat models for Podeli.

Each booking has exactly one conversation thread between its renter and
owner, so messages point straight at the booking.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

MAX_MESSAGE_LENGTH = 2000


class Message(models.Model):
    """A message on a booking's conversation thread."""

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    content = models.TextField(_("Sadržaj"), max_length=MAX_MESSAGE_LENGTH)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Poruka")
        verbose_name_plural = _("Poruke")
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["booking", "created_at"], name="chat_msg_booking_idx"),
        ]

    def __str__(self) -> str:
        return f"Message #{self.pk} on booking {self.booking_id} from {self.sender_id}"


class ChatBlock(models.Model):
    """A participant has blocked the booking's conversation."""

    booking = models.OneToOneField(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="chat_block",
    )
    blocked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_blocks_made",
    )
    blocked_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_blocks_received",
    )
    reason = models.CharField(_("Razlog"), max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Blokiran razgovor")
        verbose_name_plural = _("Blokirani razgovori")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Chat on booking {self.booking_id} blocked by {self.blocked_by_id}"
