"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "item",
        "renter",
        "owner",
        "status",
        "start_date",
        "end_date",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "delivery_method", "start_date", "end_date")
    search_fields = ("item__title", "renter__email", "owner__email")
    readonly_fields = (
        "created_at",
        "updated_at",
        "total_price",
        "total_days",
        "price_per_day",
        "version",
        "agreed_at",
        "delivered_at",
        "returned_at",
        "cancelled_at",
        "cancelled_by",
    )
