"""Celery tasks for notification delivery."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from . import services

logger = logging.getLogger(__name__)


@shared_task(name="notifications.deliver_notification")
def deliver_notification(notification_id: int) -> str:
    """Deliver one notification through the configured sink."""
    status = services.deliver(notification_id)
    logger.debug(f"Notification {notification_id} delivery status: {status}")
    return status


@shared_task(name="notifications.dispatch_pending_notifications")
def dispatch_pending_notifications(batch_size: int = 200) -> dict[str, int]:
    """
    Re-drain the outbox.

    Picks up notifications that were never queued (broker down at commit
    time) or whose delivery failed, up to NOTIFICATION_MAX_ATTEMPTS each.

    Runs every few minutes via Celery Beat.

    Returns:
        dict: counts of delivery outcomes
    """
    outcomes = {"sent": 0, "failed": 0, "skipped": 0}

    ids = list(services.pending_deliveries().values_list("pk", flat=True)[:batch_size])
    for notification_id in ids:
        status = str(services.deliver(notification_id))
        if status in outcomes:
            outcomes[status] += 1

    if ids:
        logger.info(f"Dispatched {len(ids)} pending notifications: {outcomes}")

    return outcomes
