"""
Availability Ledger

The ledger is a derived view, never a stored table: for one item, the
blocked date ranges are exactly the ranges of its bookings whose status is
in the active set. A pending request blocks nothing; many renters may ask
for the same window and only the first approval wins.

The ledger is rebuilt from the current booking rows every time it is
consulted (see ``DjangoBookingRepository.ledger_for_item``), so it cannot
drift from booking state.
"""

from dataclasses import dataclass, field
from typing import Iterable, List

from shared.domain.value_objects import DateRange


@dataclass(frozen=True)
class BookedRange:
    """A date range held by one active booking"""
    booking_id: int
    dates: DateRange


def overlaps(dates: DateRange, existing: Iterable[DateRange]) -> bool:
    """True if ``dates`` shares at least one day with any of ``existing``"""
    return any(dates.overlaps_with(other) for other in existing)


@dataclass
class AvailabilityLedger:
    """
    Active date ranges of a single item

    Usage:
        ledger = booking_repo.ledger_for_item(item_id)
        if not ledger.is_available(booking.dates, exclude_booking_id=booking.id):
            raise ConflictError(...)
    """

    item_id: int
    ranges: List[BookedRange] = field(default_factory=list)

    def is_available(self, dates: DateRange, *, exclude_booking_id=None) -> bool:
        return not overlaps(
            dates,
            (
                booked.dates for booked in self.ranges
                if booked.booking_id != exclude_booking_id
            ),
        )

    def booked_dates(self) -> List[DateRange]:
        """Blocked ranges ordered by start date"""
        return sorted(
            (booked.dates for booked in self.ranges),
            key=lambda dates: (dates.start_date, dates.end_date),
        )

    def __len__(self):
        return len(self.ranges)

    def __repr__(self):
        return f"AvailabilityLedger(item_id={self.item_id}, ranges={len(self.ranges)})"
