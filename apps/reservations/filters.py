"""FilterSet definitions for reservation listing."""

from __future__ import annotations

import django_filters  # type: ignore

from shared.domain.value_objects import CalendarDate
from .models import Reservation


class ReservationFilterSet(django_filters.FilterSet):
    """Filters on persisted reservation fields.

    ``date_from`` / ``date_to`` keep reservations whose range touches the
    given window; both take ``YYYY-MM-DD``.
    """

    status = django_filters.ChoiceFilter(field_name="status", choices=Reservation.Status.choices)
    car = django_filters.UUIDFilter(field_name="car_id")
    date_from = django_filters.CharFilter(method="filter_date_from")
    date_to = django_filters.CharFilter(method="filter_date_to")

    class Meta:
        model = Reservation
        fields = ["status", "car"]

    def filter_date_from(self, queryset, name, value):  # type: ignore
        return queryset.filter(end_date__gte=CalendarDate.parse(value).to_date())

    def filter_date_to(self, queryset, name, value):  # type: ignore
        return queryset.filter(start_date__lte=CalendarDate.parse(value).to_date())
