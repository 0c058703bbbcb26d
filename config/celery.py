import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("podeli")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# ============================================================================
# CELERY BEAT SCHEDULE (periodic tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Outbox: notifications that were never queued or whose delivery failed
    "dispatch-pending-notifications": {
        "task": "notifications.dispatch_pending_notifications",
        "schedule": 300.0,  # every 5 minutes
        "options": {"expires": 240},
    },
    # Return reminders for delivered items - every 6 hours
    "send-return-reminders": {
        "task": "bookings.send_return_reminders",
        "schedule": crontab(minute=0, hour="*/6"),
    },
    # Chat history of long-returned bookings - daily at 03:00
    "cleanup-old-messages": {
        "task": "bookings.cleanup_old_messages",
        "schedule": crontab(minute=0, hour=3),
    },
}

app.conf.timezone = "Europe/Belgrade"
