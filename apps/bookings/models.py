"""Booking persistence models for Podeli."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Booking(models.Model):
    """Zahtev za iznajmljivanje predmeta i njegov životni ciklus."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Čeka odobrenje")
        CONFIRMED = "confirmed", _("Potvrđeno")
        AGREED = "agreed", _("Dogovoreno")
        NIJE_ISPORUCEN = "nije_isporucen", _("Čeka preuzimanje")
        ISPORUCEN = "isporucen", _("Isporučeno")
        VRACEN = "vracen", _("Vraćeno")
        CANCELLED = "cancelled", _("Otkazano")

    # Statuses whose date range blocks other approvals for the same item
    ACTIVE_STATUSES = (
        Status.CONFIRMED,
        Status.AGREED,
        Status.NIJE_ISPORUCEN,
        Status.ISPORUCEN,
    )

    item = models.ForeignKey(
        "items.Item",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    renter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings_as_renter",
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings_as_owner",
        help_text=_("Vlasnik predmeta u trenutku kreiranja rezervacije."),
    )
    start_date = models.DateField()
    end_date = models.DateField()
    total_days = models.PositiveIntegerField(default=1)
    price_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Cena po danu u trenutku kreiranja rezervacije."),
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="RSD")
    delivery_method = models.CharField(max_length=20)
    status = models.CharField(
        max_length=32,
        choices=Status.choices,
        default=Status.PENDING,
    )
    renter_agreed = models.BooleanField(default=False)
    owner_agreed = models.BooleanField(default=False)
    version = models.PositiveIntegerField(
        default=0,
        help_text=_("Brojač izmena za optimističko zaključavanje."),
    )
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()
    agreed_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    returned_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        verbose_name = _("Rezervacija")
        verbose_name_plural = _("Rezervacije")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["item", "status"], name="booking_item_status_idx"),
            models.Index(fields=["renter"], name="booking_renter_idx"),
            models.Index(fields=["owner"], name="booking_owner_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} for item {self.item_id} ({self.status})"

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES
