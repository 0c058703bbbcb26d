"""Serializers for items."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Item


class ItemSerializer(serializers.ModelSerializer):
    owner_id = serializers.ReadOnlyField(source="owner.id")
    owner_name = serializers.ReadOnlyField(source="owner.display_name")

    class Meta:
        model = Item
        fields = [
            "id",
            "owner_id",
            "owner_name",
            "title",
            "description",
            "price_per_day",
            "currency",
            "delivery_methods",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
