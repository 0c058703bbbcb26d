"""Admin registration for items."""

from __future__ import annotations

from django.contrib import admin

from .models import Item


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "price_per_day", "currency", "created_at")
    search_fields = ("title", "owner__email")
    readonly_fields = ("created_at", "updated_at")
