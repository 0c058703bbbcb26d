"""Tests for the periodic booking tasks."""

from __future__ import annotations

from datetime import timedelta

import pytest
from django.test import override_settings
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.tasks import cleanup_old_messages, send_return_reminders
from apps.chat.models import Message
from apps.notifications.models import Notification

pytestmark = pytest.mark.django_db


class TestReturnReminders:
    def test_renter_is_reminded_the_day_before(self, renter, make_booking):
        tomorrow = timezone.localdate() + timedelta(days=1)
        booking = make_booking(
            status=Booking.Status.ISPORUCEN,
            start=tomorrow - timedelta(days=3),
            end=tomorrow,
        )
        version = booking.version

        assert send_return_reminders() == {"reminded": 1}

        [reminder] = Notification.objects.filter(type=Notification.Type.RETURN_REMINDER)
        assert reminder.user == renter
        assert reminder.link == f"/kontrolna-tabla/zakupi/poruke/{booking.pk}"
        assert "Bušilica Bosch" in reminder.message

        booking.refresh_from_db()
        assert booking.status == Booking.Status.ISPORUCEN
        assert booking.version == version

    def test_second_run_does_not_repeat(self, make_booking):
        tomorrow = timezone.localdate() + timedelta(days=1)
        make_booking(status=Booking.Status.ISPORUCEN, start=tomorrow, end=tomorrow)

        send_return_reminders()

        assert send_return_reminders() == {"reminded": 0}
        assert Notification.objects.filter(type=Notification.Type.RETURN_REMINDER).count() == 1

    def test_other_bookings_are_ignored(self, make_booking):
        today = timezone.localdate()
        tomorrow = today + timedelta(days=1)
        make_booking(status=Booking.Status.AGREED, start=tomorrow, end=tomorrow)
        make_booking(status=Booking.Status.ISPORUCEN, start=today, end=today + timedelta(days=2))

        assert send_return_reminders() == {"reminded": 0}


class TestCleanupOldMessages:
    @override_settings(CHAT_RETENTION_DAYS=30)
    def test_old_returned_threads_are_deleted(self, renter, owner, make_booking, post_message):
        now = timezone.now()
        old = make_booking(status=Booking.Status.VRACEN, returned_at=now - timedelta(days=31))
        recent = make_booking(status=Booking.Status.VRACEN, returned_at=now - timedelta(days=2))
        active = make_booking(status=Booking.Status.ISPORUCEN)
        post_message(old, renter)
        post_message(old, owner)
        post_message(recent, renter)
        post_message(active, renter)

        assert cleanup_old_messages() == {"messages_deleted": 2, "bookings_processed": 1}

        assert not Message.objects.filter(booking=old).exists()
        assert Message.objects.filter(booking=recent).count() == 1
        assert Message.objects.filter(booking=active).count() == 1

    def test_nothing_to_clean(self):
        assert cleanup_old_messages() == {"messages_deleted": 0, "bookings_processed": 0}
