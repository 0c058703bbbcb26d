"""User domain models for Podeli.

Every user can both list items (as an owner) and rent items listed by
others (as a renter); the role is decided per booking, not per account.
The model keeps only what the booking core needs: an email login and a
display name used in notifications.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?\d{7,15}$",
    message=_("Neispravan format telefona. Koristite međunarodni format bez razmaka."),
)

DEFAULT_DISPLAY_NAME = "Korisnik"


class CustomUserManager(BaseUserManager):
    """User manager that logs users in by e-mail."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email je obavezan za kreiranje korisnika.")
        email = self.normalize_email(email)

        phone = extra_fields.get("phone")
        if phone:
            extra_fields["phone"] = self.normalize_phone(phone)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser mora imati is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser mora imati is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    @staticmethod
    def normalize_phone(phone: str) -> str:
        """Strip spaces and dashes so phones are stored uniformly."""
        return phone.replace(" ", "").replace("-", "")


class CustomUser(AbstractUser):
    """Platform user: owner of listed items and/or renter of others' items."""

    username = models.CharField(
        _("Prikazno ime"),
        max_length=150,
        blank=True,
        help_text=_("Opciono, koristi se u interfejsu i obaveštenjima."),
    )
    email = models.EmailField(_("Email"), unique=True)
    phone = models.CharField(
        _("Telefon"),
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        validators=[PHONE_VALIDATOR],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: list[str] = []

    class Meta:
        verbose_name = _("Korisnik")
        verbose_name_plural = _("Korisnici")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.email

    @property
    def display_name(self) -> str:
        """First name, then username, then a neutral fallback."""
        return self.first_name or self.username or DEFAULT_DISPLAY_NAME


User = CustomUser
