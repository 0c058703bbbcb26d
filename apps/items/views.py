"""Read-only item API views."""

from __future__ import annotations

from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.serializers import BookedDateRangeSerializer
from apps.bookings.services import booking_service

from .filters import ItemFilterSet
from .models import Item
from .serializers import ItemSerializer


class ItemViewSet(viewsets.ReadOnlyModelViewSet):
    """Pregled predmeta i zauzetih termina."""

    queryset = Item.objects.select_related("owner").all()
    serializer_class = ItemSerializer
    lookup_value_regex = r"\d+"
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = ItemFilterSet
    ordering_fields = ["price_per_day", "created_at"]
    ordering = ["-created_at"]

    @extend_schema(responses=BookedDateRangeSerializer(many=True))
    @action(detail=True, methods=["get"], url_path="booked-dates", url_name="booked-dates")
    def booked_dates(self, request, pk=None):  # type: ignore
        item = get_object_or_404(Item, pk=pk)
        ranges = booking_service.get_item_booked_dates(item.pk)
        return Response(BookedDateRangeSerializer(ranges, many=True).data)
