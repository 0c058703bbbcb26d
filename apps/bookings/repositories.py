"""Django ORM repository for the booking aggregate.

Maps ``apps.bookings.models.Booking`` rows to the ``Booking`` domain
aggregate and back. Writes are guarded by the ``version`` column: an
update only succeeds if the row still has the version the aggregate was
loaded with, so two transactions that read the same row can never both
write their result.
"""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from django.db.models import F  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.domain.value_objects import DateRange, Money
from apps.items.models import Item
from apps.bookings.domain.availability import AvailabilityLedger, BookedRange
from apps.bookings.domain.entities import Booking, BookingStatus, ItemSnapshot
from apps.bookings.domain.errors import StaleBookingError
from apps.bookings.models import Booking as BookingModel

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset, of=None):
    """
    Apply select_for_update when inside transaction.atomic()

    ``of`` narrows the lock to the named relations on backends that support
    ``FOR UPDATE OF``; elsewhere the whole row set of the query is locked.
    """

    connection = transaction.get_connection()
    if not connection.in_atomic_block:
        return queryset

    try:
        if of and connection.features.has_select_for_update_of:
            return queryset.select_for_update(of=of)
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class DjangoBookingRepository:
    """
    Loads and stores Booking aggregates

    Lock order: a transition locks its own booking row first and, for an
    approval, the item row second. Creation locks only the item row. The
    availability ledger is read without locks, so no transaction ever holds
    an item lock while waiting on a booking row.
    """

    def get_by_id(self, booking_id, lock: bool = False) -> Booking | None:
        queryset = BookingModel.objects.select_related("item").filter(pk=booking_id)
        if lock:
            # the joined item row stays unlocked
            queryset = _lock_queryset_if_possible(queryset, of=("self",))
        row = queryset.first()
        if row is None:
            return None
        return self._to_domain(row)

    def get_item(self, item_id, lock: bool = False) -> ItemSnapshot | None:
        """
        Load the item a booking refers to

        Locking the item row serialises every create/approve for that item,
        which is what keeps the ledger check and the write atomic.
        """
        queryset = Item.objects.filter(pk=item_id)
        if lock:
            queryset = _lock_queryset_if_possible(queryset)
        item = queryset.first()
        if item is None:
            return None
        return item.to_snapshot()

    def ledger_for_item(self, item_id) -> AvailabilityLedger:
        """
        Rebuild the availability ledger of an item from its active bookings

        Never locks: callers that need a stable ledger hold the item row lock.
        """
        queryset = BookingModel.objects.filter(
            item_id=item_id,
            status__in=BookingModel.ACTIVE_STATUSES,
        ).order_by("start_date", "end_date")

        return AvailabilityLedger(
            item_id=item_id,
            ranges=[
                BookedRange(booking_id=pk, dates=DateRange(start, end))
                for pk, start, end in queryset.values_list("pk", "start_date", "end_date")
            ],
        )

    def save(self, booking: Booking) -> Booking:
        """
        Insert a new booking or update an existing one

        Raises:
            StaleBookingError: the row was modified since ``booking`` was loaded
        """
        fields = self._to_row(booking)

        if booking.id is None:
            row = BookingModel.objects.create(version=0, **fields)
            booking.id = row.pk
            booking.version = row.version
            logger.debug(f"Inserted booking {booking.id}")
            return booking

        updated = BookingModel.objects.filter(
            pk=booking.id,
            version=booking.version,
        ).update(version=F("version") + 1, **fields)

        if updated == 0:
            logger.warning(
                f"Optimistic lock failed for booking {booking.id} "
                f"(expected version {booking.version})"
            )
            raise StaleBookingError(booking.id, booking.version)

        booking.version += 1
        return booking

    def _to_row(self, booking: Booking) -> dict:
        return {
            "item_id": booking.item_id,
            "renter_id": booking.renter_id,
            "owner_id": booking.owner_id,
            "start_date": booking.dates.start_date,
            "end_date": booking.dates.end_date,
            "total_days": booking.total_days,
            "price_per_day": booking.price_per_day.amount,
            "total_price": booking.total_price.amount,
            "currency": booking.total_price.currency,
            "delivery_method": booking.delivery_method,
            "status": booking.status.value,
            "renter_agreed": booking.renter_agreed,
            "owner_agreed": booking.owner_agreed,
            "created_at": booking.created_at,
            "updated_at": booking.updated_at,
            "agreed_at": booking.agreed_at,
            "delivered_at": booking.delivered_at,
            "returned_at": booking.returned_at,
            "cancelled_at": booking.cancelled_at,
            "cancelled_by_id": booking.cancelled_by,
        }

    def _to_domain(self, row: BookingModel) -> Booking:
        return Booking(
            id=row.pk,
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
            item_id=row.item_id,
            item_title=row.item.title,
            renter_id=row.renter_id,
            owner_id=row.owner_id,
            dates=DateRange(row.start_date, row.end_date),
            price_per_day=Money(row.price_per_day, row.currency),
            total_price=Money(row.total_price, row.currency),
            delivery_method=row.delivery_method,
            status=BookingStatus(row.status),
            renter_agreed=row.renter_agreed,
            owner_agreed=row.owner_agreed,
            agreed_at=row.agreed_at,
            delivered_at=row.delivered_at,
            returned_at=row.returned_at,
            cancelled_at=row.cancelled_at,
            cancelled_by=row.cancelled_by_id,
        )
