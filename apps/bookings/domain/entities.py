"""
Booking Domain Entities

Core business entities for the booking domain:
- Booking: Main aggregate representing one rental request and its lifecycle
- BookingStatus: FSM states for the booking lifecycle
- ItemSnapshot: Read-only view of the rented item at request time
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Tuple

from shared.domain.base import Aggregate, utcnow
from shared.domain.value_objects import DateRange, Money
from apps.bookings.domain.availability import AvailabilityLedger
from apps.bookings.domain.errors import (
    BookingValidationError,
    ConflictError,
    InvalidStateTransition,
    UnauthorizedError,
)
from apps.bookings.domain import events


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (owner approved, dates free)
    - PENDING -> CANCELLED (owner rejected, or either party cancelled)
    - CONFIRMED -> AGREED (both parties agreed after talking in chat)
    - CONFIRMED -> CANCELLED (either party cancelled)
    - AGREED -> NIJE_ISPORUCEN (owner marked the item ready)
    - NIJE_ISPORUCEN -> ISPORUCEN (owner marked the item delivered)
    - ISPORUCEN -> VRACEN (owner marked the item returned)

    The values are the wire-level contract consumed by clients.
    """
    PENDING = 'pending'                    # Waiting for the owner
    CONFIRMED = 'confirmed'                # Approved, chat open, agreement pending
    AGREED = 'agreed'                      # Both parties agreed
    NIJE_ISPORUCEN = 'nije_isporucen'      # Ready, not yet delivered
    ISPORUCEN = 'isporucen'                # Delivered to the renter
    VRACEN = 'vracen'                      # Returned (terminal)
    CANCELLED = 'cancelled'                # Rejected or cancelled (terminal)

    @property
    def is_active(self) -> bool:
        """Active bookings occupy their dates in the availability ledger"""
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


ACTIVE_STATUSES: FrozenSet[BookingStatus] = frozenset({
    BookingStatus.CONFIRMED,
    BookingStatus.AGREED,
    BookingStatus.NIJE_ISPORUCEN,
    BookingStatus.ISPORUCEN,
})

TERMINAL_STATUSES: FrozenSet[BookingStatus] = frozenset({
    BookingStatus.VRACEN,
    BookingStatus.CANCELLED,
})

CANCELLABLE_STATUSES: FrozenSet[BookingStatus] = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
})


@dataclass(frozen=True)
class ItemSnapshot:
    """The parts of an item a booking needs, captured at request time"""
    id: int
    owner_id: int
    title: str
    price_per_day: Money
    delivery_methods: Tuple[str, ...] = ()


@dataclass(eq=False, kw_only=True)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Represents a renter's request to rent one item for an inclusive range
    of calendar days, and everything that happens to it afterwards.

    Key invariants:
    - owner_id, price_per_day and total_price are fixed at creation
    - status only moves forward along BookingStatus transitions
    - agreement flags change only while CONFIRMED and are never reset
    - CONFIRMED -> AGREED happens once, when both flags are true
    - an active booking never overlaps another active booking of its item
    """

    item_id: int
    renter_id: int
    owner_id: int
    dates: DateRange
    price_per_day: Money
    total_price: Money
    delivery_method: str
    item_title: str = ''

    status: BookingStatus = BookingStatus.PENDING

    # Agreement tracking
    renter_agreed: bool = False
    owner_agreed: bool = False

    # Timestamps
    agreed_at: datetime | None = None
    delivered_at: datetime | None = None
    returned_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by: int | None = None

    @classmethod
    def request(
        cls,
        item: ItemSnapshot,
        renter_id: int,
        dates: DateRange,
        delivery_method: str,
        ledger: AvailabilityLedger,
    ) -> 'Booking':
        """
        Create a PENDING booking for ``item``

        Raises:
            BookingValidationError: self-booking or unsupported delivery method
            ConflictError: dates overlap an active booking of the item
        """
        if item.owner_id == renter_id:
            raise BookingValidationError("Ne možete rezervisati sopstveni predmet.")

        if delivery_method not in item.delivery_methods:
            raise BookingValidationError(
                "Izabrani način dostave nije dostupan za ovaj predmet."
            )

        if not ledger.is_available(dates):
            raise ConflictError(
                "Predmet je već rezervisan za izabrani period. "
                "Molimo izaberite drugi termin."
            )

        return cls(
            item_id=item.id,
            item_title=item.title,
            renter_id=renter_id,
            owner_id=item.owner_id,
            dates=dates,
            price_per_day=item.price_per_day,
            total_price=item.price_per_day * len(dates),
            delivery_method=delivery_method,
            status=BookingStatus.PENDING,
        )

    def announce_request(self):
        """Emit BookingRequested once the booking has an id"""
        self.add_event(self._event(
            events.BookingRequested,
            dates=self.dates,
            total_price=self.total_price,
        ))

    # ----- owner decision ---------------------------------------------------

    def approve(self, actor_id: int, ledger: AvailabilityLedger):
        """
        Approve the request (PENDING -> CONFIRMED)

        The ledger is re-read at approval time: other requests for the same
        dates may have been approved since this one was created.
        Events: BookingApproved
        """
        self._require_owner(actor_id, "Samo vlasnik može odobriti rezervaciju.")
        self._require_status(BookingStatus.PENDING)

        if not ledger.is_available(self.dates, exclude_booking_id=self.id):
            raise ConflictError(
                "Predmet je već rezervisan za ovaj period. Odbijte ovaj zahtev."
            )

        self._transition(BookingStatus.CONFIRMED)
        self.add_event(self._event(events.BookingApproved))

    def reject(self, actor_id: int):
        """
        Reject the request (PENDING -> CANCELLED)

        Events: BookingRejected
        """
        self._require_owner(actor_id, "Samo vlasnik može odbiti rezervaciju.")
        self._require_status(BookingStatus.PENDING)

        self._transition(BookingStatus.CANCELLED)
        self.cancelled_at = self.updated_at
        self.cancelled_by = actor_id
        self.add_event(self._event(events.BookingRejected))

    def cancel(self, actor_id: int):
        """
        Cancel the booking (PENDING/CONFIRMED -> CANCELLED)

        Either participant may cancel until both parties have agreed.
        Events: BookingCancelled
        """
        self._require_participant(actor_id)
        if self.status not in CANCELLABLE_STATUSES:
            raise InvalidStateTransition(
                f"Rezervacija u statusu '{self.status.value}' se ne može otkazati.",
                current_status=self.status,
            )

        old_status = self.status
        self._transition(BookingStatus.CANCELLED)
        self.cancelled_at = self.updated_at
        self.cancelled_by = actor_id
        self.add_event(self._event(
            events.BookingCancelled,
            cancelled_by=actor_id,
            old_status=old_status.value,
        ))

    # ----- agreement --------------------------------------------------------

    def agree(self, actor_id: int, has_messages: bool):
        """
        Register the actor's agreement while CONFIRMED

        Sets the actor's flag; when both flags are true and the booking is
        still CONFIRMED the booking moves to AGREED. The caller persists the
        result with a version check, so two concurrent calls can never both
        perform the transition.
        Events: BookingAgreed or AgreementRequested
        """
        self._require_participant(actor_id)
        self._require_status(BookingStatus.CONFIRMED)

        if not has_messages:
            raise BookingValidationError(
                "Pre potvrde dogovora morate razmeniti bar jednu poruku."
            )

        if actor_id == self.renter_id:
            self.renter_agreed = True
        else:
            self.owner_agreed = True
        self.touch()

        if self.renter_agreed and self.owner_agreed and self.status == BookingStatus.CONFIRMED:
            self._transition(BookingStatus.AGREED)
            self.agreed_at = self.updated_at
            self.add_event(self._event(events.BookingAgreed))
        else:
            self.add_event(self._event(events.AgreementRequested, agreed_by=actor_id))

    # ----- hand-over --------------------------------------------------------

    def mark_ready(self, actor_id: int):
        """AGREED -> NIJE_ISPORUCEN. Events: ItemReady"""
        self._require_owner(actor_id, "Samo vlasnik može označiti predmet kao spreman.")
        self._require_status(BookingStatus.AGREED)

        self._transition(BookingStatus.NIJE_ISPORUCEN)
        self.add_event(self._event(events.ItemReady))

    def mark_delivered(self, actor_id: int):
        """NIJE_ISPORUCEN -> ISPORUCEN. Events: ItemDelivered"""
        self._require_owner(actor_id, "Samo vlasnik može označiti predmet kao isporučen.")
        self._require_status(BookingStatus.NIJE_ISPORUCEN)

        self._transition(BookingStatus.ISPORUCEN)
        self.delivered_at = self.updated_at
        self.add_event(self._event(events.ItemDelivered))

    def mark_returned(self, actor_id: int):
        """ISPORUCEN -> VRACEN. Events: ItemReturned"""
        self._require_owner(actor_id, "Samo vlasnik može označiti predmet kao vraćen.")
        self._require_status(BookingStatus.ISPORUCEN)

        self._transition(BookingStatus.VRACEN)
        self.returned_at = self.updated_at
        self.add_event(self._event(events.ItemReturned))

    # ----- queries ----------------------------------------------------------

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.renter_id, self.owner_id)

    @property
    def total_days(self) -> int:
        return len(self.dates)

    def blocks_dates(self) -> bool:
        return self.status.is_active

    # ----- internals --------------------------------------------------------

    def _require_owner(self, actor_id: int, message: str):
        if actor_id != self.owner_id:
            raise UnauthorizedError(message)

    def _require_participant(self, actor_id: int):
        if not self.is_participant(actor_id):
            raise UnauthorizedError("Nemate pristup ovoj rezervaciji.")

    def _require_status(self, expected: BookingStatus):
        if self.status != expected:
            raise InvalidStateTransition(
                f"Operacija nije dozvoljena u statusu '{self.status.value}' "
                f"(očekivan status '{expected.value}').",
                current_status=self.status,
            )

    def _transition(self, new_status: BookingStatus):
        self.status = new_status
        self.touch(utcnow())

    def _event(self, event_class, **extra):
        return event_class(
            aggregate_id=self.id,
            booking_id=self.id,
            item_id=self.item_id,
            item_title=self.item_title,
            renter_id=self.renter_id,
            owner_id=self.owner_id,
            **extra,
        )

    def __str__(self):
        return f"Booking #{self.id} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, item_id={self.item_id}, "
            f"status={self.status.value}, dates={self.dates!r}, version={self.version})"
        )
