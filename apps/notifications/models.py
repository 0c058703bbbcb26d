"""Notification model.

A notification is shown in the web dashboard (``message`` + deep ``link``)
and is delivered once through the configured sink. The delivery fields turn
the table into an outbox drained by Celery.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    class Type(models.TextChoices):
        BOOKING_PENDING = "booking_pending", _("Nova rezervacija")
        BOOKING_APPROVED = "booking_approved", _("Rezervacija odobrena")
        BOOKING_REJECTED = "booking_rejected", _("Rezervacija odbijena")
        BOOKING_CANCELLED = "booking_cancelled", _("Rezervacija otkazana")
        AGREEMENT_REQUESTED = "agreement_requested", _("Zahtev za dogovor")
        BOOKING_AGREED = "booking_agreed", _("Dogovor postignut")
        ITEM_READY = "item_ready", _("Predmet spreman")
        ITEM_DELIVERED = "item_delivered", _("Predmet isporučen")
        ITEM_RETURNED = "item_returned", _("Predmet vraćen")
        MESSAGE_RECEIVED = "message_received", _("Nova poruka")
        RETURN_REMINDER = "return_reminder", _("Podsetnik za vraćanje")

    class DeliveryStatus(models.TextChoices):
        PENDING = "pending", _("Čeka slanje")
        SENT = "sent", _("Poslato")
        FAILED = "failed", _("Neuspešno")
        SKIPPED = "skipped", _("Preskočeno")

    user = models.ForeignKey(
        'users.CustomUser', on_delete=models.CASCADE, related_name='notifications'
    )
    message = models.TextField()
    type = models.CharField(max_length=32, choices=Type.choices)
    link = models.CharField(max_length=255, blank=True)
    is_read = models.BooleanField(default=False)
    delivery_status = models.CharField(
        max_length=16,
        choices=DeliveryStatus.choices,
        default=DeliveryStatus.PENDING,
    )
    delivery_attempts = models.PositiveSmallIntegerField(default=0)
    delivered_at = models.DateTimeField(null=True, blank=True)
    last_error = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notif_user_read_idx'),
            models.Index(fields=['delivery_status'], name='notif_delivery_idx'),
        ]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.type}"


class NotificationPreference(models.Model):
    """
    Per-user e-mail opt-in.

    Dashboard notifications are always recorded; only the e-mail copy of a
    booking request or a new chat message depends on these flags. A user
    without a row receives no e-mail.
    """

    user = models.OneToOneField(
        'users.CustomUser', on_delete=models.CASCADE, related_name='notification_preference'
    )
    email_on_booking_request = models.BooleanField(_("E-mail za nove rezervacije"), default=True)
    email_on_new_message = models.BooleanField(_("E-mail za nove poruke"), default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Notification type -> flag that allows e-mailing it
    EMAIL_FLAGS = {
        Notification.Type.BOOKING_PENDING.value: 'email_on_booking_request',
        Notification.Type.MESSAGE_RECEIVED.value: 'email_on_new_message',
    }

    class Meta:
        verbose_name = _("Podešavanje obaveštenja")
        verbose_name_plural = _("Podešavanja obaveštenja")

    def __str__(self) -> str:
        return f"Notification preferences of {self.user_id}"

    def allows_email(self, notification_type: str) -> bool:
        flag = self.EMAIL_FLAGS.get(str(notification_type))
        return bool(flag) and getattr(self, flag)
