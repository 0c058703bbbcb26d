"""Serializers for notifications."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Dashboard view of a notification; delivery bookkeeping stays internal."""

    type_display = serializers.CharField(source='get_type_display', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'type', 'type_display', 'message', 'link', 'is_read', 'created_at']
        read_only_fields = fields


class NotificationPreferenceSerializer(serializers.Serializer):
    email_on_booking_request = serializers.BooleanField(required=False)
    email_on_new_message = serializers.BooleanField(required=False)
