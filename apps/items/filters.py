"""FilterSet definitions for item listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Item


class ItemFilterSet(django_filters.FilterSet):
    """Filters used by the read-only item listing."""

    owner = django_filters.NumberFilter(field_name="owner_id", lookup_expr="exact")
    title = django_filters.CharFilter(field_name="title", lookup_expr="icontains")
    price_min = django_filters.NumberFilter(field_name="price_per_day", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price_per_day", lookup_expr="lte")
    delivery_method = django_filters.CharFilter(method="filter_delivery_method")

    class Meta:
        model = Item
        fields = ["owner", "title"]

    def filter_delivery_method(self, queryset, name, value):  # type: ignore
        # JSON containment lookups are not portable to SQLite, so filter in Python.
        ids = [item.pk for item in queryset if value in (item.delivery_methods or [])]
        return queryset.filter(pk__in=ids)
