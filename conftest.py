"""Shared pytest fixtures for the Podeli backend."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.bookings.models import Booking
from apps.chat.models import Message
from apps.items.models import Item
from apps.users.models import User


@pytest.fixture
def owner(db):
    return User.objects.create_user(
        email="vlasnik@example.com",
        password="OwnerPass123",
        first_name="Marko",
    )


@pytest.fixture
def renter(db):
    return User.objects.create_user(
        email="zakupac@example.com",
        password="RenterPass123",
        first_name="Jelena",
    )


@pytest.fixture
def stranger(db):
    return User.objects.create_user(
        email="neko@example.com",
        password="StrangerPass123",
    )


@pytest.fixture
def item(owner):
    return Item.objects.create(
        owner=owner,
        title="Bušilica Bosch",
        price_per_day=Decimal("500.00"),
        delivery_methods=["licno", "wolt"],
    )


@pytest.fixture
def make_booking(item, renter):
    """Insert a booking row directly in the given status."""

    def _make(
        status=Booking.Status.PENDING,
        start=date(2024, 1, 1),
        end=date(2024, 1, 5),
        booking_item=None,
        booking_renter=None,
        **extra,
    ) -> Booking:
        booking_item = booking_item or item
        now = timezone.now()
        days = (end - start).days + 1
        return Booking.objects.create(
            item=booking_item,
            renter=booking_renter or renter,
            owner=booking_item.owner,
            start_date=start,
            end_date=end,
            total_days=days,
            price_per_day=booking_item.price_per_day,
            total_price=booking_item.price_per_day * days,
            delivery_method="licno",
            status=status,
            created_at=now,
            updated_at=now,
            **extra,
        )

    return _make


@pytest.fixture
def post_message():
    def _post(booking, sender, content="Kada mogu da preuzmem?") -> Message:
        return Message.objects.create(booking=booking, sender=sender, content=content)

    return _post
