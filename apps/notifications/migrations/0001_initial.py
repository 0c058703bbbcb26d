import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("message", models.TextField()),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("booking_pending", "Nova rezervacija"),
                            ("booking_approved", "Rezervacija odobrena"),
                            ("booking_rejected", "Rezervacija odbijena"),
                            ("booking_cancelled", "Rezervacija otkazana"),
                            ("agreement_requested", "Zahtev za dogovor"),
                            ("booking_agreed", "Dogovor postignut"),
                            ("item_ready", "Predmet spreman"),
                            ("item_delivered", "Predmet isporučen"),
                            ("item_returned", "Predmet vraćen"),
                            ("message_received", "Nova poruka"),
                            ("return_reminder", "Podsetnik za vraćanje"),
                        ],
                        max_length=32,
                    ),
                ),
                ("link", models.CharField(blank=True, max_length=255)),
                ("is_read", models.BooleanField(default=False)),
                (
                    "delivery_status",
                    models.CharField(
                        choices=[
                            ("pending", "Čeka slanje"),
                            ("sent", "Poslato"),
                            ("failed", "Neuspešno"),
                            ("skipped", "Preskočeno"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("delivery_attempts", models.PositiveSmallIntegerField(default=0)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("last_error", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to="users.customuser",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["user", "is_read"], name="notif_user_read_idx"),
                    models.Index(fields=["delivery_status"], name="notif_delivery_idx"),
                ],
            },
        ),
    ]
