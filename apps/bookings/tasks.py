"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.notifications.links import chat_link
from apps.notifications.models import Notification
from apps.notifications.services import emit_notification

from .models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.send_return_reminders")
def send_return_reminders() -> dict[str, int]:
    """
    Remind renters the day before the item has to be returned.

    Picks delivered bookings whose last rental day is tomorrow. Booking rows
    are only read; a booking counts as reminded once its renter holds a
    reminder notification linking to it.

    Runs every 6 hours.

    Returns:
        dict: {"reminded": number of reminders sent}
    """
    tomorrow = timezone.localdate() + timedelta(days=1)
    reminded = 0

    due = Booking.objects.filter(
        status=Booking.Status.ISPORUCEN,
        end_date=tomorrow,
    ).select_related("item")

    for booking in due:
        link = chat_link(booking.pk, for_owner=False)
        with transaction.atomic():
            already_reminded = Notification.objects.filter(
                user_id=booking.renter_id,
                type=Notification.Type.RETURN_REMINDER,
                link=link,
            ).exists()
            if already_reminded:
                continue

            emit_notification(
                user_id=booking.renter_id,
                message=f'Podsetnik: Sutra je dan za vraćanje "{booking.item.title}".',
                type=Notification.Type.RETURN_REMINDER,
                link=link,
            )
            reminded += 1

    if reminded:
        logger.info(f"Sent {reminded} return reminders for {tomorrow}")

    return {"reminded": reminded}


@shared_task(name="bookings.cleanup_old_messages")
def cleanup_old_messages() -> dict[str, int]:
    """
    Delete chat history of bookings returned long ago.

    Threads of bookings that reached VRACEN more than CHAT_RETENTION_DAYS
    ago are removed.

    Runs daily.

    Returns:
        dict: {"messages_deleted": ..., "bookings_processed": ...}
    """
    from apps.chat.models import Message

    retention_days = getattr(settings, "CHAT_RETENTION_DAYS", 30)
    cutoff = timezone.now() - timedelta(days=retention_days)

    booking_ids = list(
        Booking.objects.filter(
            status=Booking.Status.VRACEN,
            returned_at__lt=cutoff,
            messages__isnull=False,
        )
        .values_list("pk", flat=True)
        .distinct()
    )
    if not booking_ids:
        return {"messages_deleted": 0, "bookings_processed": 0}

    deleted, _ = Message.objects.filter(booking_id__in=booking_ids).delete()
    logger.info(f"Deleted {deleted} messages from {len(booking_ids)} returned bookings")

    return {"messages_deleted": deleted, "bookings_processed": len(booking_ids)}
