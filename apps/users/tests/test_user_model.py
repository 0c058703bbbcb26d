"""Tests for the custom user model."""

from __future__ import annotations

import pytest

from apps.users.models import DEFAULT_DISPLAY_NAME, User

pytestmark = pytest.mark.django_db


def test_create_user_normalizes_email_and_phone():
    user = User.objects.create_user(
        email="Marko@Example.COM",
        password="OwnerPass123",
        phone="+381 64-123-4567",
    )

    assert user.email == "Marko@example.com"
    assert user.phone == "+381641234567"
    assert user.check_password("OwnerPass123")
    assert not user.is_staff


def test_create_user_requires_email():
    with pytest.raises(ValueError):
        User.objects.create_user(email="", password="x")


def test_create_superuser():
    admin = User.objects.create_superuser(email="admin@podeli.rs", password="AdminPass123")

    assert admin.is_staff and admin.is_superuser


@pytest.mark.parametrize("first_name, username, expected", [
    ("Jelena", "jeca", "Jelena"),
    ("", "jeca", "jeca"),
    ("", "", DEFAULT_DISPLAY_NAME),
])
def test_display_name_fallbacks(first_name, username, expected):
    user = User.objects.create_user(
        email="jelena@example.com",
        first_name=first_name,
        username=username,
    )

    assert user.display_name == expected
