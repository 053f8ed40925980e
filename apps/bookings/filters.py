"""Filters for reservation listings."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .domain.state_machine import ReservationStatus
from .models import Reservation


class ReservationFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(
        choices=[(status.value, status.value) for status in ReservationStatus],
        method="filter_status",
    )
    role = django_filters.ChoiceFilter(
        choices=[("guest", "guest"), ("host", "host")],
        method="filter_role",
    )
    property = django_filters.NumberFilter(field_name="property_id")
    check_in_after = django_filters.DateFilter(field_name="check_in", lookup_expr="gte")
    check_in_before = django_filters.DateFilter(field_name="check_in", lookup_expr="lte")

    class Meta:
        model = Reservation
        fields = ["status", "role", "property", "check_in_after", "check_in_before"]

    def filter_status(self, queryset, name, value):  # type: ignore
        # "completed" is derived from the check-out date, not stored
        return queryset.with_effective_status(value)

    def filter_role(self, queryset, name, value):  # type: ignore
        user = getattr(self.request, "user", None)
        if user is None or not user.is_authenticated:
            return queryset.none()
        if value == "host":
            return queryset.filter(host_id=user.id)
        return queryset.filter(Q(guest_id=user.id))
