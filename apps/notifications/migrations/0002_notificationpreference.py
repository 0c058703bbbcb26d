import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("users", "0001_initial"),
        ("notifications", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="NotificationPreference",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email_on_booking_request", models.BooleanField(default=True, verbose_name="E-mail za nove rezervacije")),
                ("email_on_new_message", models.BooleanField(default=True, verbose_name="E-mail za nove poruke")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notification_preference",
                        to="users.customuser",
                    ),
                ),
            ],
            options={
                "verbose_name": "Podešavanje obaveštenja",
                "verbose_name_plural": "Podešavanja obaveštenja",
            },
        ),
    ]
