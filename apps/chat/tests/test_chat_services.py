"""Tests for the messaging gate and chat use cases."""

from __future__ import annotations

import pytest

from apps.bookings.domain.errors import (
    BookingValidationError,
    InvalidStateTransition,
    NotFoundError,
    UnauthorizedError,
)
from apps.bookings.models import Booking
from apps.chat import services
from apps.chat.models import MAX_MESSAGE_LENGTH, ChatBlock, Message
from apps.notifications.models import Notification

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize("status, allowed", [
    (Booking.Status.PENDING, False),
    (Booking.Status.CONFIRMED, True),
    (Booking.Status.AGREED, True),
    (Booking.Status.NIJE_ISPORUCEN, True),
    (Booking.Status.ISPORUCEN, True),
    (Booking.Status.VRACEN, False),
    (Booking.Status.CANCELLED, False),
])
def test_messaging_gate(status, allowed):
    assert services.is_messaging_allowed(status) is allowed
    assert services.is_messaging_allowed(str(status.value)) is allowed


def test_has_messages(renter, make_booking, post_message):
    booking = make_booking(status=Booking.Status.CONFIRMED)
    assert not services.has_messages(booking.pk)

    post_message(booking, renter)

    assert services.has_messages(booking.pk)


class TestSendMessage:
    def test_renter_message_notifies_owner(self, renter, owner, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)

        message = services.send_message(booking.pk, renter.pk, "  Može li sutra u 10?  ")

        assert message.content == "Može li sutra u 10?"
        assert message.sender == renter
        [notification] = Notification.objects.filter(type=Notification.Type.MESSAGE_RECEIVED)
        assert notification.user == owner
        assert notification.link == f"/kontrolna-tabla/predmeti/poruke/{booking.pk}"
        assert "Jelena" in notification.message

    def test_owner_message_notifies_renter(self, renter, owner, make_booking):
        booking = make_booking(status=Booking.Status.AGREED)

        services.send_message(booking.pk, owner.pk, "Važi.")

        [notification] = Notification.objects.filter(type=Notification.Type.MESSAGE_RECEIVED)
        assert notification.user == renter
        assert notification.link == f"/kontrolna-tabla/zakupi/poruke/{booking.pk}"

    @pytest.mark.parametrize("status", [
        Booking.Status.PENDING,
        Booking.Status.VRACEN,
        Booking.Status.CANCELLED,
    ])
    def test_closed_threads(self, renter, make_booking, status):
        booking = make_booking(status=status)

        with pytest.raises(InvalidStateTransition):
            services.send_message(booking.pk, renter.pk, "Zdravo")
        assert not Message.objects.exists()

    def test_blank_content(self, renter, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)

        with pytest.raises(BookingValidationError):
            services.send_message(booking.pk, renter.pk, "   ")

    def test_content_length_limit(self, renter, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)

        services.send_message(booking.pk, renter.pk, "a" * MAX_MESSAGE_LENGTH)
        with pytest.raises(BookingValidationError):
            services.send_message(booking.pk, renter.pk, "a" * (MAX_MESSAGE_LENGTH + 1))

    def test_stranger(self, stranger, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)

        with pytest.raises(UnauthorizedError):
            services.send_message(booking.pk, stranger.pk, "Zdravo")

    def test_unknown_booking(self, renter):
        with pytest.raises(NotFoundError):
            services.send_message(424242, renter.pk, "Zdravo")


def test_list_messages_oldest_first(renter, owner, make_booking, post_message):
    booking = make_booking(status=Booking.Status.CONFIRMED)
    first = post_message(booking, renter, "Prva")
    second = post_message(booking, owner, "Druga")

    assert list(services.list_messages(booking.pk, owner.pk)) == [first, second]


def test_mark_messages_as_read_only_touches_the_other_party(renter, owner, make_booking, post_message):
    booking = make_booking(status=Booking.Status.CONFIRMED)
    from_renter = post_message(booking, renter)
    from_owner = post_message(booking, owner)

    assert services.mark_messages_as_read(booking.pk, owner.pk) == 1
    assert services.mark_messages_as_read(booking.pk, owner.pk) == 0

    from_renter.refresh_from_db()
    from_owner.refresh_from_db()
    assert from_renter.is_read
    assert not from_owner.is_read


class TestBlocking:
    def test_block_stops_both_participants(self, renter, owner, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)

        block = services.block_conversation(booking.pk, owner.pk, reason="  Neprimereno ponašanje ")

        assert block.blocked_user == renter
        assert block.reason == "Neprimereno ponašanje"
        for sender in (renter, owner):
            with pytest.raises(UnauthorizedError, match="Razgovor je blokiran."):
                services.send_message(booking.pk, sender.pk, "Zdravo")
        assert not Message.objects.exists()
        assert not Notification.objects.exists()

    def test_closed_status_is_reported_before_the_block(self, renter, make_booking):
        booking = make_booking(status=Booking.Status.CANCELLED)
        services.block_conversation(booking.pk, renter.pk)

        with pytest.raises(InvalidStateTransition):
            services.send_message(booking.pk, renter.pk, "Zdravo")

    def test_one_block_per_booking(self, renter, owner, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)
        services.block_conversation(booking.pk, renter.pk)

        with pytest.raises(InvalidStateTransition, match="već blokiran"):
            services.block_conversation(booking.pk, owner.pk)
        assert ChatBlock.objects.count() == 1

    def test_stranger_cannot_block(self, stranger, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)

        with pytest.raises(UnauthorizedError):
            services.block_conversation(booking.pk, stranger.pk)

    def test_only_the_blocker_or_an_admin_unblocks(self, renter, owner, make_booking, django_user_model):
        booking = make_booking(status=Booking.Status.CONFIRMED)
        services.block_conversation(booking.pk, owner.pk)

        with pytest.raises(UnauthorizedError):
            services.unblock_conversation(booking.pk, renter.pk)

        services.unblock_conversation(booking.pk, owner.pk)
        assert not services.is_blocked(booking.pk)
        services.send_message(booking.pk, renter.pk, "Hvala")

        services.block_conversation(booking.pk, owner.pk)
        admin = django_user_model.objects.create_superuser(email="admin@podeli.rs", password="AdminPass123")
        services.unblock_conversation(booking.pk, admin.pk)
        assert not services.is_blocked(booking.pk)

    def test_unblock_without_block(self, renter, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)

        with pytest.raises(InvalidStateTransition, match="nije blokiran"):
            services.unblock_conversation(booking.pk, renter.pk)

    def test_block_status_per_participant(self, renter, owner, make_booking):
        booking = make_booking(status=Booking.Status.CONFIRMED)
        assert services.get_block_status(booking.pk, renter.pk) == {
            "is_blocked": False,
            "blocked_by_me": False,
            "blocked_by_other": False,
            "reason": "",
        }

        services.block_conversation(booking.pk, renter.pk, reason="Spam")

        assert services.get_block_status(booking.pk, renter.pk)["blocked_by_me"]
        as_owner = services.get_block_status(booking.pk, owner.pk)
        assert as_owner["is_blocked"] and as_owner["blocked_by_other"]
        assert as_owner["reason"] == "Spam"
