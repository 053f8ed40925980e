"""Serializers for property calendars and price quotes."""

from __future__ import annotations

from datetime import timedelta

from django.utils import timezone  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import AvailabilityHold

MAX_CALENDAR_DAYS = 366
DEFAULT_CALENDAR_DAYS = 60


class CalendarQuerySerializer(serializers.Serializer):
    """Calendar window; both bounds are inclusive."""

    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        date_from = attrs.get("date_from") or timezone.localdate()
        date_to = attrs.get("date_to") or date_from + timedelta(days=DEFAULT_CALENDAR_DAYS - 1)
        if date_to < date_from:
            raise serializers.ValidationError("date_to must not be before date_from.")
        if (date_to - date_from).days + 1 > MAX_CALENDAR_DAYS:
            raise serializers.ValidationError(f"A calendar window spans at most {MAX_CALENDAR_DAYS} days.")
        attrs["date_from"] = date_from
        attrs["date_to"] = date_to
        return attrs


class CalendarDaySerializer(serializers.Serializer):
    date = serializers.DateField(source="day")
    status = serializers.CharField(source="status.value")
    source = serializers.SerializerMethodField()

    def get_source(self, obj) -> str | None:  # type: ignore
        return obj.source.value if obj.source else None


class CalendarDatesSerializer(serializers.Serializer):
    """Host request to block or unblock individual nights."""

    dates = serializers.ListField(
        child=serializers.DateField(),
        allow_empty=False,
        max_length=MAX_CALENDAR_DAYS,
    )
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class AvailabilityHoldSerializer(serializers.ModelSerializer):
    class Meta:
        model = AvailabilityHold
        fields = ["token", "start_date", "end_date", "status", "source", "reason"]
        read_only_fields = fields
