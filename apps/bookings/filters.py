"""FilterSet definitions for the booking grid."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filters used by the resource grid and the "my bookings" list."""

    resource = django_filters.NumberFilter(field_name="resource_id", lookup_expr="exact")
    date = django_filters.DateFilter(field_name="date", lookup_expr="exact")
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    status = django_filters.ChoiceFilter(field_name="status", choices=Booking.Status.choices)
    mine = django_filters.BooleanFilter(method="filter_mine")

    class Meta:
        model = Booking
        fields = ["resource", "date", "status"]

    def filter_mine(self, queryset, name, value):  # type: ignore
        if value is None:
            return queryset
        user = getattr(self.request, "user", None)
        if value:
            return queryset.filter(owner=user)
        return queryset.exclude(owner=user)
