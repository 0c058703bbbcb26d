"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
They are published by the unit of work inside the transaction that
produced them; the notifications app turns them into outbox rows.
"""

from dataclasses import dataclass

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange, Money


@dataclass
class BookingEvent(DomainEvent):
    """Common payload: who is involved in the booking"""
    booking_id: int | None = None
    item_id: int | None = None
    item_title: str = ''
    renter_id: int | None = None
    owner_id: int | None = None


@dataclass
class BookingRequested(BookingEvent):
    """
    Event: A renter requested a booking (-> PENDING)

    Triggers:
    - Notify the owner that a request awaits approval
    """
    dates: DateRange | None = None
    total_price: Money | None = None


@dataclass
class BookingApproved(BookingEvent):
    """
    Event: Owner approved the request (PENDING -> CONFIRMED)

    Triggers:
    - Notify the renter; chat is now open
    """


@dataclass
class BookingRejected(BookingEvent):
    """
    Event: Owner rejected the request (PENDING -> CANCELLED)

    Triggers:
    - Notify the renter
    """


@dataclass
class BookingCancelled(BookingEvent):
    """
    Event: A participant cancelled (PENDING/CONFIRMED -> CANCELLED)

    Triggers:
    - Notify the other participant, naming who cancelled
    """
    cancelled_by: int | None = None
    old_status: str = ''


@dataclass
class AgreementRequested(BookingEvent):
    """
    Event: One participant agreed, the other has not yet

    Triggers:
    - Ask the other participant to confirm the agreement
    """
    agreed_by: int | None = None


@dataclass
class BookingAgreed(BookingEvent):
    """
    Event: Both participants agreed (CONFIRMED -> AGREED)

    Emitted exactly once per booking.

    Triggers:
    - Notify both participants
    """


@dataclass
class ItemReady(BookingEvent):
    """Event: Owner prepared the item (AGREED -> NIJE_ISPORUCEN)"""


@dataclass
class ItemDelivered(BookingEvent):
    """Event: Item handed over (NIJE_ISPORUCEN -> ISPORUCEN)"""


@dataclass
class ItemReturned(BookingEvent):
    """Event: Item returned, rental finished (ISPORUCEN -> VRACEN)"""
