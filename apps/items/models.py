"""Item domain models for Podeli."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Money


class DeliveryMethod(models.TextChoices):
    LICNO = "licno", _("Lično preuzimanje")
    GLOVO = "glovo", _("Glovo")
    WOLT = "wolt", _("Wolt")
    CARGO = "cargo", _("Kargo")


def default_delivery_methods() -> list[str]:
    return [DeliveryMethod.LICNO.value]


class Item(models.Model):
    """Predmet koji vlasnik izdaje po dnevnoj ceni."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="items",
    )
    title = models.CharField(_("Naziv"), max_length=200)
    description = models.TextField(_("Opis"), blank=True)
    price_per_day = models.DecimalField(
        _("Cena po danu"),
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=3, default="RSD")
    delivery_methods = models.JSONField(
        _("Načini dostave"),
        default=default_delivery_methods,
        help_text=_("Lista dozvoljenih načina dostave (licno, glovo, wolt, cargo)."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Predmet")
        verbose_name_plural = _("Predmeti")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner"], name="items_item_owner_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    def to_snapshot(self):
        """Read-only view of this item for the booking domain."""
        from apps.bookings.domain.entities import ItemSnapshot

        return ItemSnapshot(
            id=self.pk,
            owner_id=self.owner_id,
            title=self.title,
            price_per_day=Money(self.price_per_day, self.currency),
            delivery_methods=tuple(self.delivery_methods or ()),
        )
