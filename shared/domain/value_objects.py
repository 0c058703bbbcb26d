"""
Common Value Objects

Value objects used across multiple domains:
- Money: Represents monetary amounts with currency
- DateRange: Represents an inclusive range of calendar dates (rental period)
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from shared.domain.base import ValueObject

SUPPORTED_CURRENCIES = ('RSD', 'EUR')


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a monetary amount with currency.
    Immutable and supports the arithmetic a day-rate price needs.
    """
    amount: Decimal
    currency: str = 'RSD'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    def __mul__(self, factor: int) -> 'Money':
        """Multiply money by a whole number of days"""
        if not isinstance(factor, (int, Decimal)) or isinstance(factor, bool):
            raise TypeError("Can only multiply Money by an integer or Decimal")
        return Money(self.amount * Decimal(factor), self.currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a rental period from start_date to end_date, BOTH inclusive.
    There is no time-of-day component: a rental from the 1st to the 5th
    occupies five calendar days, and a single-day rental has start == end.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError(
                f"End date ({self.end_date}) must not be before start date ({self.start_date})"
            )

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range shares at least one day with another

        Overlap formula for inclusive ranges: start1 <= end2 AND start2 <= end1

        Examples:
            - DateRange(1, 5) overlaps with DateRange(5, 7) -> True (day 5 is shared)
            - DateRange(1, 5) overlaps with DateRange(6, 7) -> False
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        return (self.start_date <= other.end_date and
                other.start_date <= self.end_date)

    def __len__(self) -> int:
        """Number of rental days, counting both the first and the last day"""
        return (self.end_date - self.start_date).days + 1

    def __str__(self):
        return f"{self.start_date.strftime('%d.%m.%Y')} - {self.end_date.strftime('%d.%m.%Y')}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
