"""Integration tests for notification endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.notifications.models import Notification, NotificationPreference
from apps.users.models import User


class NotificationAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="zakupac@example.com", password="RenterPass123")
        self.other = User.objects.create_user(email="vlasnik@example.com", password="OwnerPass123")
        self.mine = [
            Notification.objects.create(
                user=self.user,
                message=f"Obaveštenje {i}",
                type=Notification.Type.BOOKING_APPROVED,
                link="/kontrolna-tabla/zakupi",
            )
            for i in range(3)
        ]
        self.theirs = Notification.objects.create(
            user=self.other,
            message="Nova rezervacija",
            type=Notification.Type.BOOKING_PENDING,
        )
        self.client.force_authenticate(self.user)

    def test_list_shows_own_notifications_newest_first(self) -> None:
        response = self.client.get(reverse("notification-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([n["id"] for n in response.data], [n.id for n in reversed(self.mine)])

    def test_mark_read(self) -> None:
        target = self.mine[0]

        response = self.client.post(reverse("notification-mark-read", args=[target.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        target.refresh_from_db()
        self.assertTrue(target.is_read)

    def test_cannot_mark_someone_elses_notification(self) -> None:
        response = self.client.post(reverse("notification-mark-read", args=[self.theirs.id]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_all_read_and_unread_count(self) -> None:
        count_url = reverse("notification-unread-count")
        self.assertEqual(self.client.get(count_url).data, {"count": 3})

        response = self.client.post(reverse("notification-mark-all-read"))

        self.assertEqual(response.data, {"marked": 3})
        self.assertEqual(self.client.get(count_url).data, {"count": 0})

    def test_requires_authentication(self) -> None:
        self.client.force_authenticate(None)

        self.assertEqual(self.client.get(reverse("notification-list")).status_code, status.HTTP_401_UNAUTHORIZED)

    def test_preferences_default_to_opted_in_and_can_be_changed(self) -> None:
        url = reverse("notification-preferences")

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"email_on_booking_request": True, "email_on_new_message": True})

        response = self.client.patch(url, {"email_on_new_message": False}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"email_on_booking_request": True, "email_on_new_message": False})
        preference = NotificationPreference.objects.get(user=self.user)
        self.assertFalse(preference.email_on_new_message)
