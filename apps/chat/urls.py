"""URL routing for booking chat (mounted under the bookings prefix)."""

from django.urls import path  # type: ignore

from .views import BookingMessagesView, ChatBlockView, MarkMessagesReadView

urlpatterns = [
    path("<int:booking_id>/messages/", BookingMessagesView.as_view(), name="booking-messages"),
    path(
        "<int:booking_id>/messages/read/",
        MarkMessagesReadView.as_view(),
        name="booking-messages-read",
    ),
    path("<int:booking_id>/block/", ChatBlockView.as_view(), name="booking-chat-block"),
]
