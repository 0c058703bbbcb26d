"""Dashboard deep links carried by notifications."""

OWNER_BOOKINGS_LINK = "/kontrolna-tabla/predmeti"
RENTER_BOOKINGS_LINK = "/kontrolna-tabla/zakupi"


def bookings_link(*, for_owner: bool) -> str:
    return OWNER_BOOKINGS_LINK if for_owner else RENTER_BOOKINGS_LINK


def chat_link(booking_id, *, for_owner: bool) -> str:
    return f"{bookings_link(for_owner=for_owner)}/poruke/{booking_id}"
