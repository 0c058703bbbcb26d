import decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import apps.items.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Item",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="Naziv")),
                ("description", models.TextField(blank=True, verbose_name="Opis")),
                (
                    "price_per_day",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0.00"))],
                        verbose_name="Cena po danu",
                    ),
                ),
                ("currency", models.CharField(default="RSD", max_length=3)),
                (
                    "delivery_methods",
                    models.JSONField(
                        default=apps.items.models.default_delivery_methods,
                        help_text="Lista dozvoljenih načina dostave (licno, glovo, wolt, cargo).",
                        verbose_name="Načini dostave",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Predmet",
                "verbose_name_plural": "Predmeti",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["owner"], name="items_item_owner_idx")],
            },
        ),
    ]
