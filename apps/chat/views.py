"""API views for booking chat."""

from __future__ import annotations

from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.domain.errors import BookingError
from apps.bookings.views import error_response

from . import services
from .serializers import (
    ChatBlockCreateSerializer,
    ChatBlockStatusSerializer,
    MessageCreateSerializer,
    MessageSerializer,
)


class BookingMessagesView(APIView):
    """Poruke između zakupca i vlasnika za jednu rezervaciju."""

    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses=MessageSerializer(many=True))
    def get(self, request, booking_id: int):  # type: ignore
        try:
            messages = services.list_messages(booking_id, request.user.id)
        except BookingError as exc:
            return error_response(exc.kind, exc.message)
        return Response(MessageSerializer(messages, many=True).data)

    @extend_schema(request=MessageCreateSerializer, responses={201: MessageSerializer})
    def post(self, request, booking_id: int):  # type: ignore
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            message = services.send_message(
                booking_id,
                request.user.id,
                serializer.validated_data["content"],
            )
        except BookingError as exc:
            return error_response(exc.kind, exc.message)
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


class MarkMessagesReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=None)
    def post(self, request, booking_id: int):  # type: ignore
        try:
            count = services.mark_messages_as_read(booking_id, request.user.id)
        except BookingError as exc:
            return error_response(exc.kind, exc.message)
        return Response({"marked": count}, status=status.HTTP_200_OK)


class ChatBlockView(APIView):
    """Blokiranje razgovora jedne rezervacije."""

    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses=ChatBlockStatusSerializer)
    def get(self, request, booking_id: int):  # type: ignore
        try:
            block_status = services.get_block_status(booking_id, request.user.id)
        except BookingError as exc:
            return error_response(exc.kind, exc.message)
        return Response(ChatBlockStatusSerializer(block_status).data)

    @extend_schema(request=ChatBlockCreateSerializer, responses={201: ChatBlockStatusSerializer})
    def post(self, request, booking_id: int):  # type: ignore
        serializer = ChatBlockCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            services.block_conversation(
                booking_id,
                request.user.id,
                serializer.validated_data.get("reason", ""),
            )
        except BookingError as exc:
            return error_response(exc.kind, exc.message)
        block_status = services.get_block_status(booking_id, request.user.id)
        return Response(ChatBlockStatusSerializer(block_status).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={204: None})
    def delete(self, request, booking_id: int):  # type: ignore
        try:
            services.unblock_conversation(booking_id, request.user.id)
        except BookingError as exc:
            return error_response(exc.kind, exc.message)
        return Response(status=status.HTTP_204_NO_CONTENT)
