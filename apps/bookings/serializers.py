"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Zahtev zakupca za rezervaciju predmeta."""

    item = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    delivery_method = serializers.CharField(max_length=20)


class BookingSerializer(serializers.ModelSerializer):
    """Detaljan prikaz rezervacije."""

    item_id = serializers.ReadOnlyField(source="item.id")
    item_title = serializers.ReadOnlyField(source="item.title")
    renter_id = serializers.ReadOnlyField(source="renter.id")
    renter_name = serializers.ReadOnlyField(source="renter.display_name")
    owner_id = serializers.ReadOnlyField(source="owner.id")
    owner_name = serializers.ReadOnlyField(source="owner.display_name")
    cancelled_by_id = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "item_id",
            "item_title",
            "renter_id",
            "renter_name",
            "owner_id",
            "owner_name",
            "start_date",
            "end_date",
            "total_days",
            "price_per_day",
            "total_price",
            "currency",
            "delivery_method",
            "status",
            "renter_agreed",
            "owner_agreed",
            "agreed_at",
            "delivered_at",
            "returned_at",
            "cancelled_at",
            "cancelled_by_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookedDateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
