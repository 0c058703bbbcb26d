"""Admin registration for chat messages and blocks."""

from __future__ import annotations

from django.contrib import admin

from .models import ChatBlock, Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "sender", "is_read", "created_at")
    list_filter = ("is_read",)
    search_fields = ("content", "sender__email")
    readonly_fields = ("created_at",)


@admin.register(ChatBlock)
class ChatBlockAdmin(admin.ModelAdmin):
    list_display = ("booking", "blocked_by", "blocked_user", "reason", "created_at")
    search_fields = ("reason", "blocked_by__email", "blocked_user__email")
    readonly_fields = ("created_at",)
