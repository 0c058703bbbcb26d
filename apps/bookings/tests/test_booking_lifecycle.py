"""Booking use cases against the database: lifecycle, guards and races."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

import pytest

from shared.application.result import ErrorKind
from apps.bookings.application.command_handlers import (
    AgreeToBookingCommand,
    AgreeToBookingHandler,
    ApproveBookingCommand,
    ApproveBookingHandler,
)
from apps.bookings.domain.errors import StaleBookingError
from apps.bookings.models import Booking
from apps.bookings.repositories import DjangoBookingRepository
from apps.bookings.services import booking_service
from apps.items.models import Item
from apps.notifications.models import Notification

pytestmark = pytest.mark.django_db


def create(item, renter, start=date(2024, 1, 1), end=date(2024, 1, 5), delivery_method="licno"):
    return booking_service.create_booking(
        item_id=item.pk,
        renter_id=renter.pk,
        start_date=start,
        end_date=end,
        delivery_method=delivery_method,
    )


def notifications_of(type_, user=None):
    queryset = Notification.objects.filter(type=type_)
    if user is not None:
        queryset = queryset.filter(user=user)
    return queryset


def assert_active_bookings_do_not_overlap(item):
    active = list(
        Booking.objects.filter(item=item, status__in=Booking.ACTIVE_STATUSES)
        .order_by("start_date")
    )
    for first, second in zip(active, active[1:]):
        assert first.end_date < second.start_date


class TestCreateBooking:
    def test_scenario_a_price_and_status(self, item, renter, owner):
        result = create(item, renter)

        assert result.ok, result
        booking = Booking.objects.get(pk=result.value.id)
        assert booking.total_days == 5
        assert booking.total_price == Decimal("2500.00")
        assert booking.price_per_day == Decimal("500.00")
        assert booking.status == Booking.Status.PENDING
        assert booking.owner == owner
        assert booking.version == 0

        [notification] = notifications_of(Notification.Type.BOOKING_PENDING)
        assert notification.user == owner
        assert notification.link == "/kontrolna-tabla/predmeti"
        assert "Bušilica Bosch" in notification.message

    def test_single_day_rental(self, item, renter):
        result = create(item, renter, start=date(2024, 2, 1), end=date(2024, 2, 1))

        assert result.ok
        assert result.value.total_days == 1

    def test_end_before_start(self, item, renter):
        result = create(item, renter, start=date(2024, 2, 5), end=date(2024, 2, 1))

        assert result.error == ErrorKind.VALIDATION
        assert not Booking.objects.exists()

    def test_missing_item(self, renter):
        result = booking_service.create_booking(
            item_id=9999,
            renter_id=renter.pk,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 2),
            delivery_method="licno",
        )

        assert result.error == ErrorKind.NOT_FOUND

    def test_self_booking(self, item, owner):
        result = create(item, owner)

        assert result.error == ErrorKind.VALIDATION
        assert not Booking.objects.exists()
        assert not Notification.objects.exists()

    def test_delivery_method_not_offered(self, item, renter):
        result = create(item, renter, delivery_method="cargo")

        assert result.error == ErrorKind.VALIDATION

    def test_pending_requests_do_not_block_each_other(self, item, renter, stranger):
        assert create(item, renter).ok
        assert create(item, stranger, start=date(2024, 1, 3), end=date(2024, 1, 4)).ok

    def test_overlap_with_active_booking_is_a_conflict(self, item, stranger, make_booking):
        make_booking(status=Booking.Status.CONFIRMED)

        result = create(item, stranger, start=date(2024, 1, 5), end=date(2024, 1, 7))

        assert result.error == ErrorKind.CONFLICT
        assert Booking.objects.count() == 1

    def test_cancelled_and_returned_bookings_free_their_dates(self, item, stranger, make_booking):
        make_booking(status=Booking.Status.CANCELLED)
        make_booking(status=Booking.Status.VRACEN)

        assert create(item, stranger).ok


class TestApproveAndReject:
    def test_approve(self, item, renter, owner):
        booking_id = create(item, renter).value.id

        result = booking_service.approve_booking(booking_id, owner.pk)

        assert result.ok
        booking = Booking.objects.get(pk=booking_id)
        assert booking.status == Booking.Status.CONFIRMED
        assert booking.version == 1

        [notification] = notifications_of(Notification.Type.BOOKING_APPROVED)
        assert notification.user == renter
        assert notification.link == f"/kontrolna-tabla/zakupi/poruke/{booking_id}"

    def test_scenario_b_second_approval_conflicts(self, item, renter, stranger, owner):
        first = create(item, renter).value.id
        second = create(item, stranger, start=date(2024, 1, 3), end=date(2024, 1, 4)).value.id

        assert booking_service.approve_booking(first, owner.pk).ok
        result = booking_service.approve_booking(second, owner.pk)

        assert result.error == ErrorKind.CONFLICT
        assert Booking.objects.get(pk=second).status == Booking.Status.PENDING
        assert_active_bookings_do_not_overlap(item)

        # The owner resolves it by rejecting the losing request
        assert booking_service.reject_booking(second, owner.pk).ok

    def test_concurrent_approvals_confirm_exactly_one(self, item, renter, stranger, owner):
        """
        Two overlapping requests are approved at the same time.

        The second approval runs after the first has written its row but
        before the first commits. It must see the first in the ledger and
        lose, leaving exactly one confirmed booking.
        """
        first = create(item, renter).value.id
        second = create(item, stranger, start=date(2024, 1, 3), end=date(2024, 1, 4)).value.id
        losing_results = []

        class InterleavedRepository(DjangoBookingRepository):
            def save(self, booking):
                saved = super().save(booking)
                losing_results.append(booking_service.approve_booking(second, owner.pk))
                return saved

        handler = ApproveBookingHandler(InterleavedRepository())
        winner = handler.handle(ApproveBookingCommand(booking_id=first, actor_id=owner.pk))

        assert winner.status.value == Booking.Status.CONFIRMED
        [loser] = losing_results
        assert loser.error == ErrorKind.CONFLICT
        assert Booking.objects.get(pk=second).status == Booking.Status.PENDING
        assert Booking.objects.filter(item=item, status=Booking.Status.CONFIRMED).count() == 1
        assert notifications_of(Notification.Type.BOOKING_APPROVED).count() == 1
        assert_active_bookings_do_not_overlap(item)

    def test_approval_locks_booking_then_item(self, item, renter, owner):
        booking_id = create(item, renter).value.id

        with mock.patch(
            "apps.bookings.repositories._lock_queryset_if_possible",
            side_effect=lambda queryset, of=None: queryset,
        ) as lock:
            assert booking_service.approve_booking(booking_id, owner.pk).ok

        assert [(call.args[0].model, call.kwargs.get("of")) for call in lock.call_args_list] == [
            (Booking, ("self",)),
            (Item, None),
        ]

    def test_renter_cannot_approve(self, item, renter):
        booking_id = create(item, renter).value.id

        result = booking_service.approve_booking(booking_id, renter.pk)

        assert result.error == ErrorKind.UNAUTHORIZED
        assert Booking.objects.get(pk=booking_id).status == Booking.Status.PENDING

    def test_approve_twice(self, item, renter, owner):
        booking_id = create(item, renter).value.id
        booking_service.approve_booking(booking_id, owner.pk)

        result = booking_service.approve_booking(booking_id, owner.pk)

        assert result.error == ErrorKind.INVALID_STATE_TRANSITION

    def test_unknown_booking(self, owner):
        assert booking_service.approve_booking(12345, owner.pk).error == ErrorKind.NOT_FOUND

    def test_scenario_d_reject(self, item, renter, owner):
        booking_id = create(item, renter).value.id

        result = booking_service.reject_booking(booking_id, owner.pk)

        assert result.ok
        booking = Booking.objects.get(pk=booking_id)
        assert booking.status == Booking.Status.CANCELLED
        assert booking.cancelled_by == owner
        assert booking.cancelled_at is not None
        assert notifications_of(Notification.Type.BOOKING_REJECTED, renter).count() == 1


class TestCancel:
    def test_renter_cancels_and_owner_is_told_who(self, renter, owner, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)

        result = booking_service.cancel_booking(booking.pk, renter.pk)

        assert result.ok
        [notification] = notifications_of(Notification.Type.BOOKING_CANCELLED)
        assert notification.user == owner
        assert "Jelena" in notification.message
        assert notification.link == "/kontrolna-tabla/predmeti"

    def test_owner_cancel_uses_fallback_name(self, renter, owner, make_booking):
        owner.first_name = ""
        owner.save()
        booking = make_booking(status=Booking.Status.PENDING)

        assert booking_service.cancel_booking(booking.pk, owner.pk).ok

        [notification] = notifications_of(Notification.Type.BOOKING_CANCELLED)
        assert notification.user == renter
        assert notification.message.startswith("Korisnik")

    @pytest.mark.parametrize("status", [
        Booking.Status.AGREED,
        Booking.Status.NIJE_ISPORUCEN,
        Booking.Status.ISPORUCEN,
        Booking.Status.VRACEN,
        Booking.Status.CANCELLED,
    ])
    def test_cancel_after_agreement(self, renter, make_booking, status):
        booking = make_booking(status=status)

        result = booking_service.cancel_booking(booking.pk, renter.pk)

        assert result.error == ErrorKind.INVALID_STATE_TRANSITION
        booking.refresh_from_db()
        assert booking.status == status
        assert booking.version == 0

    def test_stranger_cannot_cancel(self, stranger, make_booking):
        booking = make_booking()

        assert booking_service.cancel_booking(booking.pk, stranger.pk).error == ErrorKind.UNAUTHORIZED


class TestAgreement:
    def test_zero_messages_blocks_agreement(self, renter, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)

        result = booking_service.agree_to_booking(booking.pk, renter.pk)

        assert result.error == ErrorKind.VALIDATION
        booking.refresh_from_db()
        assert not booking.renter_agreed
        assert booking.status == Booking.Status.CONFIRMED

    def test_scenario_c(self, renter, owner, make_booking, post_message):
        booking = make_booking(status=Booking.Status.CONFIRMED)
        post_message(booking, renter)

        assert booking_service.agree_to_booking(booking.pk, renter.pk).ok
        booking.refresh_from_db()
        assert booking.renter_agreed
        assert booking.status == Booking.Status.CONFIRMED
        [request] = notifications_of(Notification.Type.AGREEMENT_REQUESTED)
        assert request.user == owner
        assert request.link == f"/kontrolna-tabla/predmeti/poruke/{booking.pk}"

        assert booking_service.agree_to_booking(booking.pk, owner.pk).ok
        booking.refresh_from_db()
        assert booking.status == Booking.Status.AGREED
        assert booking.owner_agreed and booking.renter_agreed
        assert booking.agreed_at is not None

        agreed = notifications_of(Notification.Type.BOOKING_AGREED)
        assert sorted(n.user_id for n in agreed) == sorted([renter.pk, owner.pk])

    def test_agreeing_twice_does_not_transition(self, renter, make_booking, post_message):
        booking = make_booking(status=Booking.Status.CONFIRMED)
        post_message(booking, renter)

        booking_service.agree_to_booking(booking.pk, renter.pk)
        booking_service.agree_to_booking(booking.pk, renter.pk)

        booking.refresh_from_db()
        assert booking.status == Booking.Status.CONFIRMED
        assert not notifications_of(Notification.Type.BOOKING_AGREED).exists()

    def test_concurrent_agreement_transitions_exactly_once(self, renter, owner, make_booking, post_message):
        """
        The owner's call read the booking before the renter's call committed.

        Its write loses the version check, it re-reads the booking with the
        renter's flag set and performs the only CONFIRMED -> AGREED transition.
        """
        booking = make_booking(status=Booking.Status.CONFIRMED)
        post_message(booking, owner)

        repo = DjangoBookingRepository()
        stale_snapshot = repo.get_by_id(booking.pk)

        class StaleOnceRepository(DjangoBookingRepository):
            reads = 0

            def get_by_id(self, booking_id, lock=False):
                self.reads += 1
                if self.reads == 1:
                    return stale_snapshot
                return super().get_by_id(booking_id, lock=lock)

        assert booking_service.agree_to_booking(booking.pk, renter.pk).ok

        owner_handler = AgreeToBookingHandler(StaleOnceRepository())
        result = owner_handler.handle(AgreeToBookingCommand(booking_id=booking.pk, actor_id=owner.pk))

        assert result.status.value == Booking.Status.AGREED
        booking.refresh_from_db()
        assert booking.status == Booking.Status.AGREED
        assert booking.agreed_at is not None
        assert booking.version == 2
        assert notifications_of(Notification.Type.BOOKING_AGREED).count() == 2
        # The lost attempt's "agreement requested" was rolled back with it
        assert notifications_of(Notification.Type.AGREEMENT_REQUESTED).count() == 1

        # A late duplicate call can no longer transition
        late = booking_service.agree_to_booking(booking.pk, renter.pk)
        assert late.error == ErrorKind.INVALID_STATE_TRANSITION
        assert notifications_of(Notification.Type.BOOKING_AGREED).count() == 2

    def test_retries_are_bounded(self, renter, owner, make_booking, post_message):
        booking = make_booking(status=Booking.Status.CONFIRMED)
        post_message(booking, owner)

        class AlwaysStaleRepository(DjangoBookingRepository):
            def get_by_id(self, booking_id, lock=False):
                snapshot = super().get_by_id(booking_id, lock=lock)
                snapshot.version -= 1
                return snapshot

        handler = AgreeToBookingHandler(AlwaysStaleRepository(), max_retries=3)

        with pytest.raises(StaleBookingError):
            handler.handle(AgreeToBookingCommand(booking_id=booking.pk, actor_id=renter.pk))

        booking.refresh_from_db()
        assert not booking.renter_agreed
        assert not Notification.objects.exists()

    def test_retry_bound_comes_from_settings(self, settings):
        settings.BOOKING_MAX_RETRIES = 5

        assert AgreeToBookingHandler(DjangoBookingRepository()).max_retries == 5
        assert ApproveBookingHandler(DjangoBookingRepository()).max_retries == 5


class TestHandOver:
    def test_ready_delivered_returned(self, renter, owner, make_booking):
        booking = make_booking(status=Booking.Status.AGREED)

        assert booking_service.mark_as_ready(booking.pk, owner.pk).ok
        assert booking_service.mark_as_delivered(booking.pk, owner.pk).ok
        assert booking_service.mark_as_returned(booking.pk, owner.pk).ok

        booking.refresh_from_db()
        assert booking.status == Booking.Status.VRACEN
        assert booking.delivered_at is not None
        assert booking.returned_at is not None
        for type_ in (
            Notification.Type.ITEM_READY,
            Notification.Type.ITEM_DELIVERED,
            Notification.Type.ITEM_RETURNED,
        ):
            assert notifications_of(type_, renter).count() == 1

    def test_renter_cannot_mark_ready(self, renter, make_booking):
        booking = make_booking(status=Booking.Status.AGREED)

        assert booking_service.mark_as_ready(booking.pk, renter.pk).error == ErrorKind.UNAUTHORIZED

    def test_wrong_prior_status(self, owner, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)

        result = booking_service.mark_as_delivered(booking.pk, owner.pk)

        assert result.error == ErrorKind.INVALID_STATE_TRANSITION


@pytest.mark.parametrize("status", [Booking.Status.VRACEN, Booking.Status.CANCELLED])
def test_terminal_states_reject_every_operation(status, renter, owner, make_booking, post_message):
    booking = make_booking(status=status)
    post_message(booking, renter)

    owner_operations = [
        booking_service.approve_booking,
        booking_service.reject_booking,
        booking_service.mark_as_ready,
        booking_service.mark_as_delivered,
        booking_service.mark_as_returned,
    ]
    for operation in owner_operations:
        assert operation(booking.pk, owner.pk).error == ErrorKind.INVALID_STATE_TRANSITION

    for actor in (renter, owner):
        assert booking_service.cancel_booking(booking.pk, actor.pk).error == ErrorKind.INVALID_STATE_TRANSITION
        assert booking_service.agree_to_booking(booking.pk, actor.pk).error == ErrorKind.INVALID_STATE_TRANSITION

    booking.refresh_from_db()
    assert booking.status == status
    assert booking.version == 0
    assert not Notification.objects.exists()


def test_get_booking_is_for_participants_only(renter, owner, stranger, make_booking):
    booking = make_booking()

    assert booking_service.get_booking(booking.pk, renter.pk).value == booking
    assert booking_service.get_booking(booking.pk, owner.pk).ok
    assert booking_service.get_booking(booking.pk, stranger.pk).error == ErrorKind.UNAUTHORIZED
    assert booking_service.get_booking(0, renter.pk).error == ErrorKind.NOT_FOUND


def test_booked_dates_list_only_active_bookings(item, make_booking):
    make_booking(status=Booking.Status.ISPORUCEN, start=date(2024, 3, 1), end=date(2024, 3, 3))
    make_booking(status=Booking.Status.CONFIRMED, start=date(2024, 1, 1), end=date(2024, 1, 2))
    make_booking(status=Booking.Status.PENDING, start=date(2024, 2, 1), end=date(2024, 2, 2))
    make_booking(status=Booking.Status.CANCELLED, start=date(2024, 4, 1), end=date(2024, 4, 2))

    assert booking_service.get_item_booked_dates(item.pk) == [
        {"start_date": date(2024, 1, 1), "end_date": date(2024, 1, 2)},
        {"start_date": date(2024, 3, 1), "end_date": date(2024, 3, 3)},
    ]
