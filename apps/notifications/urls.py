"""URL routing for notifications (mounted at /api/v1/notifications/)."""

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import NotificationPreferenceView, NotificationViewSet

# Mounted without a prefix, so no API root view that would shadow the list
router = SimpleRouter()
router.register(r'', NotificationViewSet, basename='notification')

urlpatterns = [
    path('preferences/', NotificationPreferenceView.as_view(), name='notification-preferences'),
    path('', include(router.urls)),
]
