"""Admin registration for notifications."""

from __future__ import annotations

from django.contrib import admin

from .models import Notification, NotificationPreference


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "type", "is_read", "delivery_status", "delivery_attempts", "created_at")
    list_filter = ("type", "is_read", "delivery_status")
    search_fields = ("message", "user__email")
    readonly_fields = ("created_at", "updated_at", "delivered_at", "last_error")


@admin.register(NotificationPreference)
class NotificationPreferenceAdmin(admin.ModelAdmin):
    list_display = ("user", "email_on_booking_request", "email_on_new_message", "updated_at")
    search_fields = ("user__email",)
