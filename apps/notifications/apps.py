from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.notifications"
    verbose_name = "Obaveštenja"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus
        from apps.notifications.handlers import register_event_handlers

        register_event_handlers(message_bus)
