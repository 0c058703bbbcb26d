"""API views for the booking domain."""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.application.result import ErrorKind, Result

from .models import Booking
from .serializers import BookingCreateSerializer, BookingSerializer
from .services import booking_service

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_STATE_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
}


def error_response(kind: ErrorKind, message: str) -> Response:
    """Render a business failure as ``{"error": kind, "detail": message}``."""

    return Response({"error": kind.value, "detail": message}, status=ERROR_STATUS[kind])


class BookingViewSet(viewsets.GenericViewSet):
    """Kreiranje rezervacija i prelazi kroz njihov životni ciklus."""

    queryset = Booking.objects.none()
    serializer_class = BookingSerializer
    lookup_value_regex = r"\d+"
    permission_classes = [permissions.IsAuthenticated]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter("role", str, enum=["renter", "owner"], required=False),
        ]
    )
    def list(self, request):  # type: ignore
        role = request.query_params.get("role")
        if role == "renter":
            queryset = booking_service.list_bookings_as_renter(request.user.id)
        elif role == "owner":
            queryset = booking_service.list_bookings_as_owner(request.user.id)
        else:
            queryset = booking_service.list_bookings(request.user.id)

        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = BookingSerializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        return Response(BookingSerializer(queryset, many=True).data)

    def retrieve(self, request, pk=None):  # type: ignore
        result = booking_service.get_booking(int(pk), request.user.id)
        if not result.ok:
            return error_response(result.error, result.message)
        return Response(BookingSerializer(result.value).data)

    @extend_schema(request=BookingCreateSerializer, responses={201: BookingSerializer})
    def create(self, request):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = booking_service.create_booking(
            item_id=data["item"],
            renter_id=request.user.id,
            start_date=data["start_date"],
            end_date=data["end_date"],
            delivery_method=data["delivery_method"],
        )
        return self._respond(result, status.HTTP_201_CREATED)

    @extend_schema(request=None, responses=BookingSerializer)
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        return self._respond(booking_service.approve_booking(int(pk), request.user.id))

    @extend_schema(request=None, responses=BookingSerializer)
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        return self._respond(booking_service.reject_booking(int(pk), request.user.id))

    @extend_schema(request=None, responses=BookingSerializer)
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        return self._respond(booking_service.cancel_booking(int(pk), request.user.id))

    @extend_schema(request=None, responses=BookingSerializer)
    @action(detail=True, methods=["post"])
    def agree(self, request, pk=None):  # type: ignore
        return self._respond(booking_service.agree_to_booking(int(pk), request.user.id))

    @extend_schema(request=None, responses=BookingSerializer)
    @action(detail=True, methods=["post"], url_path="mark-ready", url_name="mark-ready")
    def mark_ready(self, request, pk=None):  # type: ignore
        return self._respond(booking_service.mark_as_ready(int(pk), request.user.id))

    @extend_schema(request=None, responses=BookingSerializer)
    @action(detail=True, methods=["post"], url_path="mark-delivered", url_name="mark-delivered")
    def mark_delivered(self, request, pk=None):  # type: ignore
        return self._respond(booking_service.mark_as_delivered(int(pk), request.user.id))

    @extend_schema(request=None, responses=BookingSerializer)
    @action(detail=True, methods=["post"], url_path="mark-returned", url_name="mark-returned")
    def mark_returned(self, request, pk=None):  # type: ignore
        return self._respond(booking_service.mark_as_returned(int(pk), request.user.id))

    def _respond(self, result: Result, success_status: int = status.HTTP_200_OK) -> Response:
        if not result.ok:
            return error_response(result.error, result.message)
        booking = Booking.objects.select_related("item", "renter", "owner").get(pk=result.value.id)
        return Response(BookingSerializer(booking).data, status=success_status)
