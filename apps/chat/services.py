"""Messaging gate and chat use cases.

The booking engine only asks two questions of the chat: whether a status
allows messaging at all, and whether a booking's thread has any message
yet. The rest of this module is the chat surface the participants use.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore

from apps.bookings.domain.errors import (
    BookingValidationError,
    InvalidStateTransition,
    NotFoundError,
    UnauthorizedError,
)
from apps.bookings.models import Booking
from apps.notifications.links import chat_link
from apps.notifications.models import Notification
from apps.notifications.services import emit_notification

from .models import MAX_MESSAGE_LENGTH, ChatBlock, Message

logger = logging.getLogger(__name__)

CHAT_ALLOWED_STATUSES = frozenset({
    Booking.Status.CONFIRMED.value,
    Booking.Status.AGREED.value,
    Booking.Status.NIJE_ISPORUCEN.value,
    Booking.Status.ISPORUCEN.value,
})


def is_messaging_allowed(status: str) -> bool:
    return status in CHAT_ALLOWED_STATUSES


def has_messages(booking_id: int) -> bool:
    """True once at least one message exists on the booking's thread."""
    return Message.objects.filter(booking_id=booking_id).exists()


def _get_booking_for_participant(booking_id: int, actor_id: int) -> Booking:
    booking = Booking.objects.select_related("item").filter(pk=booking_id).first()
    if booking is None:
        raise NotFoundError("Rezervacija nije pronađena.")
    if actor_id not in (booking.renter_id, booking.owner_id):
        raise UnauthorizedError("Nemate pristup ovoj rezervaciji.")
    return booking


def send_message(booking_id: int, actor_id: int, content: str) -> Message:
    """
    Post a message on the booking thread and notify the other participant.

    Raises:
        NotFoundError, UnauthorizedError: unknown booking or not a participant
        InvalidStateTransition: the booking status does not allow messaging
        UnauthorizedError: the conversation is blocked
        BookingValidationError: empty or too long content
    """
    booking = _get_booking_for_participant(booking_id, actor_id)

    if not is_messaging_allowed(booking.status):
        raise InvalidStateTransition(
            "Poruke nisu dozvoljene za ovu rezervaciju.",
            current_status=booking.status,
        )

    if is_blocked(booking.pk):
        raise UnauthorizedError("Razgovor je blokiran.")

    content = (content or "").strip()
    if not content:
        raise BookingValidationError("Poruka ne može biti prazna.")
    if len(content) > MAX_MESSAGE_LENGTH:
        raise BookingValidationError(
            f"Poruka je predugačka (maksimalno {MAX_MESSAGE_LENGTH} karaktera)."
        )

    with transaction.atomic():
        message = Message.objects.create(
            booking=booking,
            sender_id=actor_id,
            content=content,
        )

        recipient_is_owner = actor_id == booking.renter_id
        recipient_id = booking.owner_id if recipient_is_owner else booking.renter_id
        sender_name = message.sender.display_name
        emit_notification(
            user_id=recipient_id,
            message=f'Nova poruka od {sender_name} za "{booking.item.title}".',
            type=Notification.Type.MESSAGE_RECEIVED,
            link=chat_link(booking.pk, for_owner=recipient_is_owner),
        )

    logger.info(f"Message {message.pk} posted on booking {booking.pk} by user {actor_id}")
    return message


def list_messages(booking_id: int, actor_id: int):
    """The booking thread, oldest first."""
    booking = _get_booking_for_participant(booking_id, actor_id)
    return Message.objects.filter(booking=booking).select_related("sender").order_by("created_at", "id")


def mark_messages_as_read(booking_id: int, actor_id: int) -> int:
    """Mark the other participant's unread messages as read; returns how many."""
    booking = _get_booking_for_participant(booking_id, actor_id)
    return (
        Message.objects.filter(booking=booking, is_read=False)
        .exclude(sender_id=actor_id)
        .update(is_read=True)
    )


# ----- blocking ---------------------------------------------------------------

def is_blocked(booking_id: int) -> bool:
    return ChatBlock.objects.filter(booking_id=booking_id).exists()


def block_conversation(booking_id: int, actor_id: int, reason: str = "") -> ChatBlock:
    """
    Block the booking's conversation against the other participant.

    One block per booking; while it exists nobody can post on the thread.

    Raises:
        NotFoundError, UnauthorizedError: unknown booking or not a participant
        InvalidStateTransition: the conversation is already blocked
    """
    booking = _get_booking_for_participant(booking_id, actor_id)
    blocked_user_id = booking.owner_id if actor_id == booking.renter_id else booking.renter_id

    try:
        with transaction.atomic():
            block = ChatBlock.objects.create(
                booking=booking,
                blocked_by_id=actor_id,
                blocked_user_id=blocked_user_id,
                reason=(reason or "").strip(),
            )
    except IntegrityError:
        raise InvalidStateTransition("Razgovor je već blokiran.")

    logger.info(f"Chat on booking {booking.pk} blocked by user {actor_id}")
    return block


def unblock_conversation(booking_id: int, actor_id: int) -> None:
    """
    Lift the block. Only the participant who blocked, or a superuser, may.

    Raises:
        InvalidStateTransition: the conversation is not blocked
        UnauthorizedError: someone else blocked it and the actor is no admin
    """
    block = ChatBlock.objects.filter(booking_id=booking_id).first()
    if block is None:
        raise InvalidStateTransition("Razgovor nije blokiran.")

    if block.blocked_by_id != actor_id:
        is_admin = get_user_model().objects.filter(pk=actor_id, is_superuser=True).exists()
        if not is_admin:
            raise UnauthorizedError("Samo onaj ko je blokirao ili admin može odblokirati.")

    block.delete()
    logger.info(f"Chat on booking {booking_id} unblocked by user {actor_id}")


def get_block_status(booking_id: int, actor_id: int) -> dict:
    """Block state of the thread as seen by ``actor_id``."""
    _get_booking_for_participant(booking_id, actor_id)
    block = ChatBlock.objects.filter(booking_id=booking_id).first()
    if block is None:
        return {"is_blocked": False, "blocked_by_me": False, "blocked_by_other": False, "reason": ""}
    return {
        "is_blocked": True,
        "blocked_by_me": block.blocked_by_id == actor_id,
        "blocked_by_other": block.blocked_by_id != actor_id,
        "reason": block.reason,
    }
