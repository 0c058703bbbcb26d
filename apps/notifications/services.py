"""Notification services: recording notifications and delivering them."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.db import DatabaseError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Notification, NotificationPreference

logger = logging.getLogger(__name__)


# ============================================================================
# RECORDING (outbox)
# ============================================================================

def emit_notification(*, user_id: int, message: str, type: str, link: str = "") -> Notification | None:
    """
    Record a notification for ``user_id`` in the current transaction.

    The row is written inside a savepoint: if the write fails, only the
    notification is rolled back and the caller's state change goes on.
    Delivery through the sink is scheduled for after the commit.

    Returns:
        The created notification, or None if it could not be written.
    """
    try:
        with transaction.atomic():
            notification = Notification.objects.create(
                user_id=user_id,
                message=message,
                type=type,
                link=link,
            )
    except DatabaseError as e:
        logger.error(f"Failed to record {type} notification for user {user_id}: {e}", exc_info=True)
        return None

    logger.info(f"Notification {notification.pk} ({type}) recorded for user {user_id}")
    transaction.on_commit(lambda: _schedule_delivery(notification.pk))
    return notification


def _schedule_delivery(notification_id: int) -> None:
    from .tasks import deliver_notification

    try:
        deliver_notification.delay(notification_id)
    except Exception as e:  # noqa: BLE001
        # Broker unavailable; the periodic dispatcher picks the row up later.
        logger.warning(f"Could not queue delivery of notification {notification_id}: {e}")


# ============================================================================
# SINKS
# ============================================================================

class LogSink:
    """Writes the notification to the application log."""

    name = "log"

    def send(self, notification: Notification) -> bool:
        logger.info(
            f"[NOTIFICATION] to user {notification.user_id} ({notification.type}): "
            f"{notification.message} {notification.link}"
        )
        return True


class EmailSink:
    """
    Sends the notification as a plain-text e-mail via Django's mail backend.

    Only types the recipient opted in to are e-mailed; everything else is
    reported as not sent and the row ends up ``skipped``.
    """

    name = "email"

    def send(self, notification: Notification) -> bool:
        email = notification.user.email
        if not email:
            return False

        if not wants_email(notification.user_id, notification.type):
            logger.debug(
                f"User {notification.user_id} did not opt in to {notification.type} e-mails"
            )
            return False

        site_url = getattr(settings, "SITE_URL", "").rstrip("/")
        body = notification.message
        if notification.link:
            body = f"{body}\n\n{site_url}{notification.link}"

        send_mail(
            subject=f"Podeli: {notification.get_type_display()}",
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[email],
            fail_silently=False,
        )
        return True


SINKS = {
    LogSink.name: LogSink,
    EmailSink.name: EmailSink,
}


def get_sink():
    sink_name = getattr(settings, "NOTIFICATION_SINK", LogSink.name)
    try:
        return SINKS[sink_name]()
    except KeyError:
        raise ValueError(f"Unknown NOTIFICATION_SINK: {sink_name}")


# ============================================================================
# DELIVERY
# ============================================================================

def deliver(notification_id: int, sink=None) -> str:
    """
    Hand one notification to the sink and record the outcome on the row.

    Sink errors are stored on the notification (``failed``), never raised.

    Returns:
        The resulting delivery status.
    """
    with transaction.atomic():
        notification = (
            Notification.objects.select_for_update()
            .select_related("user")
            .filter(pk=notification_id)
            .first()
        )
        if notification is None:
            logger.warning(f"Notification {notification_id} no longer exists")
            return Notification.DeliveryStatus.SKIPPED

        if notification.delivery_status in (
            Notification.DeliveryStatus.SENT,
            Notification.DeliveryStatus.SKIPPED,
        ):
            return notification.delivery_status

        sink = sink or get_sink()
        notification.delivery_attempts += 1

        try:
            sent = sink.send(notification)
        except Exception as e:  # noqa: BLE001
            logger.error(
                f"Sink '{sink.name}' failed for notification {notification.pk}: {e}",
                exc_info=True,
            )
            notification.delivery_status = Notification.DeliveryStatus.FAILED
            notification.last_error = str(e)
        else:
            if sent:
                notification.delivery_status = Notification.DeliveryStatus.SENT
                notification.delivered_at = timezone.now()
                notification.last_error = ""
            else:
                notification.delivery_status = Notification.DeliveryStatus.SKIPPED

        notification.save(
            update_fields=[
                "delivery_status",
                "delivery_attempts",
                "delivered_at",
                "last_error",
                "updated_at",
            ]
        )

    return notification.delivery_status


def pending_deliveries():
    """Rows still waiting for the sink, within the retry limit."""
    max_attempts = getattr(settings, "NOTIFICATION_MAX_ATTEMPTS", 5)
    return Notification.objects.filter(
        delivery_status__in=[
            Notification.DeliveryStatus.PENDING,
            Notification.DeliveryStatus.FAILED,
        ],
        delivery_attempts__lt=max_attempts,
    ).order_by("created_at")


# ============================================================================
# READ STATE
# ============================================================================

def mark_all_as_read(user_id: int) -> int:
    return Notification.objects.filter(user_id=user_id, is_read=False).update(is_read=True)


def unread_count(user_id: int) -> int:
    return Notification.objects.filter(user_id=user_id, is_read=False).count()


# ============================================================================
# E-MAIL PREFERENCES
# ============================================================================

def wants_email(user_id: int, notification_type: str) -> bool:
    preference = NotificationPreference.objects.filter(user_id=user_id).first()
    return preference is not None and preference.allows_email(notification_type)


def get_preferences(user_id: int) -> NotificationPreference:
    """The user's preferences, created with both e-mails enabled on first access."""
    preference, created = NotificationPreference.objects.get_or_create(user_id=user_id)
    if created:
        logger.info(f"Created notification preferences for user {user_id}")
    return preference


def update_preferences(user_id: int, **flags: bool) -> NotificationPreference:
    """Change only the flags that were passed."""
    preference = get_preferences(user_id)
    changed = [name for name, value in flags.items() if value is not None]
    for name in changed:
        setattr(preference, name, flags[name])
    if changed:
        preference.save(update_fields=[*changed, "updated_at"])
    return preference
