"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Renter requests an item for a date range
- ApproveBookingCommand: Owner approves a pending request
- RejectBookingCommand: Owner rejects a pending request
- CancelBookingCommand: Either participant cancels before agreement
- AgreeToBookingCommand: A participant confirms the agreement
- MarkAsReadyCommand / MarkAsDeliveredCommand / MarkAsReturnedCommand:
  Owner moves the item through hand-over and return

Every command carries the acting user's id explicitly.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable
import logging

from django.conf import settings

from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import DateRange
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.errors import (
    BookingValidationError,
    NotFoundError,
    StaleBookingError,
)

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to request a booking

    This is the primary entry point for renters.
    """
    item_id: int
    renter_id: int
    start_date: date
    end_date: date
    delivery_method: str


@dataclass
class BookingCommand:
    """A command acting on an existing booking"""
    booking_id: int
    actor_id: int


@dataclass
class ApproveBookingCommand(BookingCommand):
    """Owner approves a pending request"""


@dataclass
class RejectBookingCommand(BookingCommand):
    """Owner rejects a pending request"""


@dataclass
class CancelBookingCommand(BookingCommand):
    """Renter or owner cancels the booking"""


@dataclass
class AgreeToBookingCommand(BookingCommand):
    """Renter or owner confirms the agreement"""


@dataclass
class MarkAsReadyCommand(BookingCommand):
    """Owner marks the item ready for hand-over"""


@dataclass
class MarkAsDeliveredCommand(BookingCommand):
    """Owner marks the item delivered"""


@dataclass
class MarkAsReturnedCommand(BookingCommand):
    """Owner marks the item returned"""


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Strategy:
    1. Start database transaction (atomic)
    2. Lock the item row (serialises create/approve for the item)
    3. Rebuild the availability ledger from active bookings
    4. Create the PENDING Booking aggregate (domain validation)
    5. Save, then announce BookingRequested (needs the new id)
    6. Events are published to the bus before the transaction commits
    """

    def __init__(self, booking_repo):
        self.booking_repo = booking_repo

    def handle(self, command: CreateBookingCommand) -> Booking:
        """
        Handle booking creation

        Returns: Created Booking aggregate

        Raises:
            NotFoundError: item does not exist
            BookingValidationError: bad dates, self-booking, delivery method
            ConflictError: dates overlap an active booking
        """
        logger.info(
            f"Creating booking for item {command.item_id}, "
            f"renter {command.renter_id}, dates {command.start_date} - {command.end_date}"
        )

        try:
            dates = DateRange(command.start_date, command.end_date)
        except ValueError:
            raise BookingValidationError(
                "Datum završetka ne može biti pre datuma početka."
            )

        with DjangoUnitOfWork() as uow:
            item = self.booking_repo.get_item(command.item_id, lock=True)
            if item is None:
                raise NotFoundError("Predmet nije pronađen.")

            ledger = self.booking_repo.ledger_for_item(item.id)

            booking = Booking.request(
                item=item,
                renter_id=command.renter_id,
                dates=dates,
                delivery_method=command.delivery_method,
                ledger=ledger,
            )

            self.booking_repo.save(booking)
            booking.announce_request()
            uow.collect_events(booking)

        logger.info(
            f"Booking {booking.id} created: {booking.total_days} days, "
            f"total {booking.total_price}"
        )

        return booking


class BookingTransitionHandler:
    """
    Base handler for commands that move an existing booking forward

    Loads the booking under a row lock, lets ``apply`` run the domain
    transition, and saves it with a version check. If another transaction
    wrote the row in between, the whole attempt (including its events) is
    rolled back and retried against a fresh read.
    """

    action = "update"

    def __init__(self, booking_repo, max_retries: int | None = None):
        self.booking_repo = booking_repo
        if max_retries is None:
            max_retries = getattr(settings, "BOOKING_MAX_RETRIES", 3)
        self.max_retries = max(1, max_retries)

    def handle(self, command: BookingCommand) -> Booking:
        logger.info(
            f"{self.__class__.__name__}: {self.action} booking {command.booking_id} "
            f"by user {command.actor_id}"
        )

        for attempt in range(1, self.max_retries + 1):
            try:
                booking = self._attempt(command)
            except StaleBookingError:
                if attempt == self.max_retries:
                    logger.error(
                        f"Giving up on booking {command.booking_id} after {attempt} attempts"
                    )
                    raise
                logger.info(
                    f"Booking {command.booking_id} changed concurrently, "
                    f"retrying ({attempt}/{self.max_retries})"
                )
                continue

            logger.info(f"Booking {booking.id} is now {booking.status.value}")
            return booking

    def _attempt(self, command: BookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
            if booking is None:
                raise NotFoundError("Rezervacija nije pronađena.")

            self.apply(booking, command)

            self.booking_repo.save(booking)
            uow.collect_events(booking)
        return booking

    def apply(self, booking: Booking, command: BookingCommand):
        raise NotImplementedError


class ApproveBookingHandler(BookingTransitionHandler):
    """
    Handler for approving a request

    The overlap check is re-run here against the item's active bookings,
    with the item row locked, because other requests for the same dates
    may have been approved since this one was created. The booking row is
    already held at this point, so the item lock is always taken second.
    """

    action = "approve"

    def apply(self, booking: Booking, command: ApproveBookingCommand):
        self.booking_repo.get_item(booking.item_id, lock=True)
        ledger = self.booking_repo.ledger_for_item(booking.item_id)
        booking.approve(command.actor_id, ledger)


class RejectBookingHandler(BookingTransitionHandler):
    action = "reject"

    def apply(self, booking: Booking, command: RejectBookingCommand):
        booking.reject(command.actor_id)


class CancelBookingHandler(BookingTransitionHandler):
    action = "cancel"

    def apply(self, booking: Booking, command: CancelBookingCommand):
        booking.cancel(command.actor_id)


class AgreeToBookingHandler(BookingTransitionHandler):
    """
    Handler for the two-party agreement

    Set flag, check both flags and transition happen on one locked,
    version-checked copy of the booking. When both parties agree at the
    same instant, one of them loses the version check, re-reads the
    booking with the other's flag already set and performs the single
    CONFIRMED -> AGREED transition.
    """

    action = "agree to"

    def __init__(self, booking_repo, has_messages: Callable[[int], bool] | None = None,
                 max_retries: int | None = None):
        super().__init__(booking_repo, max_retries=max_retries)
        if has_messages is None:
            from apps.chat.services import has_messages
        self.has_messages = has_messages

    def apply(self, booking: Booking, command: AgreeToBookingCommand):
        booking.agree(command.actor_id, has_messages=self.has_messages(booking.id))


class MarkAsReadyHandler(BookingTransitionHandler):
    action = "mark ready"

    def apply(self, booking: Booking, command: MarkAsReadyCommand):
        booking.mark_ready(command.actor_id)


class MarkAsDeliveredHandler(BookingTransitionHandler):
    action = "mark delivered"

    def apply(self, booking: Booking, command: MarkAsDeliveredCommand):
        booking.mark_delivered(command.actor_id)


class MarkAsReturnedHandler(BookingTransitionHandler):
    action = "mark returned"

    def apply(self, booking: Booking, command: MarkAsReturnedCommand):
        booking.mark_returned(command.actor_id)


def register_command_handlers(bus, booking_repo=None):
    """Wire every booking command to its handler (called from AppConfig.ready)"""
    from apps.bookings.repositories import DjangoBookingRepository

    repo = booking_repo or DjangoBookingRepository()
    handlers = {
        CreateBookingCommand: CreateBookingHandler(repo),
        ApproveBookingCommand: ApproveBookingHandler(repo),
        RejectBookingCommand: RejectBookingHandler(repo),
        CancelBookingCommand: CancelBookingHandler(repo),
        AgreeToBookingCommand: AgreeToBookingHandler(repo),
        MarkAsReadyCommand: MarkAsReadyHandler(repo),
        MarkAsDeliveredCommand: MarkAsDeliveredHandler(repo),
        MarkAsReturnedCommand: MarkAsReturnedHandler(repo),
    }
    for command_type, handler in handlers.items():
        if not bus.handles(command_type):
            bus.register_command_handler(command_type, handler.handle)
