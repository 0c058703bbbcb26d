"""
Booking event handlers

Turn booking domain events into user notifications. They run on the
message bus inside the booking transaction, so the notification rows
commit or roll back together with the state change that produced them.
"""

import logging

from apps.bookings.domain import events
from apps.users.models import DEFAULT_DISPLAY_NAME, User

from .links import bookings_link, chat_link
from .models import Notification
from .services import emit_notification

logger = logging.getLogger(__name__)


def _display_name(user_id) -> str:
    user = User.objects.filter(pk=user_id).first()
    return user.display_name if user else DEFAULT_DISPLAY_NAME


def notify_owner_of_request(event: events.BookingRequested):
    emit_notification(
        user_id=event.owner_id,
        message=f'Nova rezervacija za "{event.item_title}" ({event.dates}). Odobrite ili odbijte zahtev.',
        type=Notification.Type.BOOKING_PENDING,
        link=bookings_link(for_owner=True),
    )


def notify_renter_of_approval(event: events.BookingApproved):
    emit_notification(
        user_id=event.renter_id,
        message=(
            f'Vaša rezervacija za "{event.item_title}" je odobrena! '
            "Sada možete da se dogovorite sa vlasnikom putem poruka."
        ),
        type=Notification.Type.BOOKING_APPROVED,
        link=chat_link(event.booking_id, for_owner=False),
    )


def notify_renter_of_rejection(event: events.BookingRejected):
    emit_notification(
        user_id=event.renter_id,
        message=f'Vaša rezervacija za "{event.item_title}" je odbijena.',
        type=Notification.Type.BOOKING_REJECTED,
        link=bookings_link(for_owner=False),
    )


def notify_other_party_of_cancellation(event: events.BookingCancelled):
    recipient_is_owner = event.cancelled_by == event.renter_id
    recipient_id = event.owner_id if recipient_is_owner else event.renter_id
    emit_notification(
        user_id=recipient_id,
        message=(
            f'{_display_name(event.cancelled_by)} je otkazao/la rezervaciju '
            f'za "{event.item_title}".'
        ),
        type=Notification.Type.BOOKING_CANCELLED,
        link=bookings_link(for_owner=recipient_is_owner),
    )


def notify_other_party_of_agreement_request(event: events.AgreementRequested):
    recipient_is_owner = event.agreed_by == event.renter_id
    recipient_id = event.owner_id if recipient_is_owner else event.renter_id
    emit_notification(
        user_id=recipient_id,
        message=(
            f'{_display_name(event.agreed_by)} je potvrdio/la dogovor za '
            f'"{event.item_title}". Potvrdite i vi da biste završili dogovor.'
        ),
        type=Notification.Type.AGREEMENT_REQUESTED,
        link=chat_link(event.booking_id, for_owner=recipient_is_owner),
    )


def notify_both_parties_of_agreement(event: events.BookingAgreed):
    for user_id, for_owner in ((event.renter_id, False), (event.owner_id, True)):
        emit_notification(
            user_id=user_id,
            message=f'Dogovor za "{event.item_title}" je postignut!',
            type=Notification.Type.BOOKING_AGREED,
            link=bookings_link(for_owner=for_owner),
        )


def notify_renter_item_ready(event: events.ItemReady):
    emit_notification(
        user_id=event.renter_id,
        message=f'Predmet "{event.item_title}" je spreman za preuzimanje.',
        type=Notification.Type.ITEM_READY,
        link=bookings_link(for_owner=False),
    )


def notify_renter_item_delivered(event: events.ItemDelivered):
    emit_notification(
        user_id=event.renter_id,
        message=f'Predmet "{event.item_title}" je označen kao isporučen.',
        type=Notification.Type.ITEM_DELIVERED,
        link=bookings_link(for_owner=False),
    )


def notify_renter_item_returned(event: events.ItemReturned):
    emit_notification(
        user_id=event.renter_id,
        message=f'Predmet "{event.item_title}" je vraćen. Hvala što koristite Podeli!',
        type=Notification.Type.ITEM_RETURNED,
        link=bookings_link(for_owner=False),
    )


EVENT_HANDLERS = {
    events.BookingRequested: [notify_owner_of_request],
    events.BookingApproved: [notify_renter_of_approval],
    events.BookingRejected: [notify_renter_of_rejection],
    events.BookingCancelled: [notify_other_party_of_cancellation],
    events.AgreementRequested: [notify_other_party_of_agreement_request],
    events.BookingAgreed: [notify_both_parties_of_agreement],
    events.ItemReady: [notify_renter_item_ready],
    events.ItemDelivered: [notify_renter_item_delivered],
    events.ItemReturned: [notify_renter_item_returned],
}


def register_event_handlers(bus):
    """Subscribe the notification handlers to booking events"""
    for event_type, handlers in EVENT_HANDLERS.items():
        for handler in handlers:
            bus.register_event_handler(event_type, handler)
    logger.debug(f"Registered notification handlers for {len(EVENT_HANDLERS)} booking events")
