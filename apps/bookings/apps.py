from django.apps import AppConfig


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    verbose_name = "Rezervacije"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus
        from apps.bookings.application.command_handlers import register_command_handlers

        register_command_handlers(message_bus)
