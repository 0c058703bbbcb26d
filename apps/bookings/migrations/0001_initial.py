import decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("items", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("total_days", models.PositiveIntegerField(default=1)),
                (
                    "price_per_day",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0.00"),
                        help_text="Cena po danu u trenutku kreiranja rezervacije.",
                        max_digits=10,
                    ),
                ),
                ("total_price", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=12)),
                ("currency", models.CharField(default="RSD", max_length=3)),
                ("delivery_method", models.CharField(max_length=20)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Čeka odobrenje"),
                            ("confirmed", "Potvrđeno"),
                            ("agreed", "Dogovoreno"),
                            ("nije_isporucen", "Čeka preuzimanje"),
                            ("isporucen", "Isporučeno"),
                            ("vracen", "Vraćeno"),
                            ("cancelled", "Otkazano"),
                        ],
                        default="pending",
                        max_length=32,
                    ),
                ),
                ("renter_agreed", models.BooleanField(default=False)),
                ("owner_agreed", models.BooleanField(default=False)),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Brojač izmena za optimističko zaključavanje.",
                    ),
                ),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
                ("agreed_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("returned_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "cancelled_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to="items.item",
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        help_text="Vlasnik predmeta u trenutku kreiranja rezervacije.",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings_as_owner",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "renter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings_as_renter",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Rezervacija",
                "verbose_name_plural": "Rezervacije",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["item", "status"], name="booking_item_status_idx"),
                    models.Index(fields=["renter"], name="booking_renter_idx"),
                    models.Index(fields=["owner"], name="booking_owner_idx"),
                    models.Index(fields=["status"], name="booking_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(end_date__gte=models.F("start_date")),
                        name="booking_valid_dates",
                    ),
                ],
            },
        ),
    ]
