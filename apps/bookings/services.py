"""Application services for booking workflows.

``BookingService`` is the entry point used by views and tasks. Mutations are
dispatched to the command handlers through the message bus; business-rule
violations come back as ``Result`` failures tagged with an ``ErrorKind``
instead of exceptions, so every caller has to decide what each kind means
for it.
"""

from __future__ import annotations

import logging
from datetime import date

from django.db.models import Q  # type: ignore

from shared.application.message_bus import message_bus
from shared.application.result import ErrorKind, Result
from apps.bookings.application.command_handlers import (
    AgreeToBookingCommand,
    ApproveBookingCommand,
    CancelBookingCommand,
    CreateBookingCommand,
    MarkAsDeliveredCommand,
    MarkAsReadyCommand,
    MarkAsReturnedCommand,
    RejectBookingCommand,
)
from apps.bookings.domain.errors import BookingError
from apps.bookings.repositories import DjangoBookingRepository

from .models import Booking

logger = logging.getLogger(__name__)


class BookingService:
    """Facade over the booking use cases."""

    def __init__(self, bus=None, booking_repo=None):
        self.bus = bus or message_bus
        self.booking_repo = booking_repo or DjangoBookingRepository()

    # ----- commands ---------------------------------------------------------

    def create_booking(
        self,
        *,
        item_id: int,
        renter_id: int,
        start_date: date,
        end_date: date,
        delivery_method: str,
    ) -> Result:
        return self._execute(CreateBookingCommand(
            item_id=item_id,
            renter_id=renter_id,
            start_date=start_date,
            end_date=end_date,
            delivery_method=delivery_method,
        ))

    def approve_booking(self, booking_id: int, actor_id: int) -> Result:
        return self._execute(ApproveBookingCommand(booking_id=booking_id, actor_id=actor_id))

    def reject_booking(self, booking_id: int, actor_id: int) -> Result:
        return self._execute(RejectBookingCommand(booking_id=booking_id, actor_id=actor_id))

    def cancel_booking(self, booking_id: int, actor_id: int) -> Result:
        return self._execute(CancelBookingCommand(booking_id=booking_id, actor_id=actor_id))

    def agree_to_booking(self, booking_id: int, actor_id: int) -> Result:
        return self._execute(AgreeToBookingCommand(booking_id=booking_id, actor_id=actor_id))

    def mark_as_ready(self, booking_id: int, actor_id: int) -> Result:
        return self._execute(MarkAsReadyCommand(booking_id=booking_id, actor_id=actor_id))

    def mark_as_delivered(self, booking_id: int, actor_id: int) -> Result:
        return self._execute(MarkAsDeliveredCommand(booking_id=booking_id, actor_id=actor_id))

    def mark_as_returned(self, booking_id: int, actor_id: int) -> Result:
        return self._execute(MarkAsReturnedCommand(booking_id=booking_id, actor_id=actor_id))

    # ----- queries ----------------------------------------------------------

    def get_booking(self, booking_id: int, actor_id: int) -> Result:
        """Return the booking row if ``actor_id`` is its renter or owner."""

        booking = (
            Booking.objects.select_related("item", "renter", "owner")
            .filter(pk=booking_id)
            .first()
        )
        if booking is None:
            return Result.failure(ErrorKind.NOT_FOUND, "Rezervacija nije pronađena.")
        if actor_id not in (booking.renter_id, booking.owner_id):
            return Result.failure(ErrorKind.UNAUTHORIZED, "Nemate pristup ovoj rezervaciji.")
        return Result.success(booking)

    def list_bookings_as_renter(self, actor_id: int):
        return self._participant_queryset().filter(renter_id=actor_id).order_by("-created_at")

    def list_bookings_as_owner(self, actor_id: int):
        return self._participant_queryset().filter(owner_id=actor_id).order_by("-created_at")

    def list_bookings(self, actor_id: int):
        """Bookings where the actor is either side, newest first."""
        return (
            self._participant_queryset()
            .filter(Q(renter_id=actor_id) | Q(owner_id=actor_id))
            .order_by("-created_at")
        )

    def get_item_booked_dates(self, item_id: int) -> list[dict]:
        """Date ranges held by the item's active bookings, ordered by start date."""

        ledger = self.booking_repo.ledger_for_item(item_id)
        return [
            {"start_date": dates.start_date, "end_date": dates.end_date}
            for dates in ledger.booked_dates()
        ]

    # ----- internals --------------------------------------------------------

    def _participant_queryset(self):
        return Booking.objects.select_related("item", "renter", "owner")

    def _execute(self, command) -> Result:
        try:
            booking = self.bus.handle_command(command)
        except BookingError as exc:
            logger.info(
                f"{type(command).__name__} rejected: {exc.kind.value}: {exc.message}"
            )
            return Result.failure(exc.kind, exc.message)
        return Result.success(booking)


booking_service = BookingService()
