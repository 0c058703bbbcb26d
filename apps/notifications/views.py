"""API views for notifications."""

from __future__ import annotations

from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from . import services
from .models import Notification
from .serializers import NotificationPreferenceSerializer, NotificationSerializer

LIST_LIMIT = 50


class NotificationViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Viewset to list notifications of the authenticated user and mark them read."""

    serializer_class = NotificationSerializer
    lookup_value_regex = r'\d+'
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):  # type: ignore
        return Notification.objects.filter(user=self.request.user).order_by('-created_at', '-id')

    def list(self, request):  # type: ignore
        notifications = self.get_queryset()[:LIST_LIMIT]
        return Response(NotificationSerializer(notifications, many=True).data)

    @extend_schema(request=None)
    @action(detail=True, methods=['post'], url_path='mark-read', url_name='mark-read')
    def mark_read(self, request, pk=None):  # type: ignore
        notification = self.get_object()
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=['is_read', 'updated_at'])
        return Response({'status': 'read'}, status=status.HTTP_200_OK)

    @extend_schema(request=None)
    @action(detail=False, methods=['post'], url_path='mark-all-read', url_name='mark-all-read')
    def mark_all_read(self, request):  # type: ignore
        count = services.mark_all_as_read(request.user.id)
        return Response({'marked': count}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='unread-count', url_name='unread-count')
    def unread_count(self, request):  # type: ignore
        return Response({'count': services.unread_count(request.user.id)})


class NotificationPreferenceView(APIView):
    """E-mail opt-in of the authenticated user."""

    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses=NotificationPreferenceSerializer)
    def get(self, request):  # type: ignore
        preference = services.get_preferences(request.user.id)
        return Response(NotificationPreferenceSerializer(preference).data)

    @extend_schema(request=NotificationPreferenceSerializer, responses=NotificationPreferenceSerializer)
    def patch(self, request):  # type: ignore
        serializer = NotificationPreferenceSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        preference = services.update_preferences(request.user.id, **serializer.validated_data)
        return Response(NotificationPreferenceSerializer(preference).data)
