"""Serializers for booking chat."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    sender_id = serializers.ReadOnlyField(source="sender.id")
    sender_name = serializers.ReadOnlyField(source="sender.display_name")

    class Meta:
        model = Message
        fields = ["id", "booking", "sender_id", "sender_name", "content", "is_read", "created_at"]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    # Trimming and length limits are enforced by the chat service.
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)


class ChatBlockCreateSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True)


class ChatBlockStatusSerializer(serializers.Serializer):
    is_blocked = serializers.BooleanField()
    blocked_by_me = serializers.BooleanField()
    blocked_by_other = serializers.BooleanField()
    reason = serializers.CharField(allow_blank=True)
