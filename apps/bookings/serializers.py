"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .domain.state_machine import ReservationStatus
from .models import Reservation, ReservationStatusChange

STATUS_CHOICES = [status.value for status in ReservationStatus]


class ReservationCreateSerializer(serializers.Serializer):
    """Input of a guest's reservation request."""

    property = serializers.IntegerField(min_value=1)
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests_count = serializers.IntegerField(default=1)
    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)


class AcceptReservationSerializer(serializers.Serializer):
    check_in_instructions = serializers.CharField(required=False, allow_blank=True, default="")
    expected_status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False, allow_null=True)


class DeclineReservationSerializer(serializers.Serializer):
    # An empty reason is rejected by the lifecycle manager after authorization
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    expected_status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False, allow_null=True)


class WithdrawReservationSerializer(serializers.Serializer):
    expected_status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False, allow_null=True)


class CancelReservationSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default="")
    expected_status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False, allow_null=True)


class ReservationStatusChangeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReservationStatusChange
        fields = ["from_status", "to_status", "action", "actor", "note", "created_at"]
        read_only_fields = fields


class ReservationSerializer(serializers.ModelSerializer):
    """Read model of a reservation as seen by one of its parties."""

    property_id = serializers.ReadOnlyField(source="property.id")
    property_title = serializers.ReadOnlyField(source="property.title")
    guest_id = serializers.ReadOnlyField()
    host_id = serializers.ReadOnlyField()
    status = serializers.SerializerMethodField()
    price = serializers.SerializerMethodField()
    check_in_instructions = serializers.SerializerMethodField()

    class Meta:
        model = Reservation
        fields = [
            "id",
            "reservation_code",
            "property_id",
            "property_title",
            "guest_id",
            "host_id",
            "check_in",
            "check_out",
            "guests_count",
            "message",
            "status",
            "price",
            "check_in_instructions",
            "confirmed_at",
            "cancelled_at",
            "cancelled_by",
            "cancellation_reason",
            "cancellation_message",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_status(self, obj: Reservation) -> str:
        return obj.effective_status().value

    def get_price(self, obj: Reservation) -> dict:
        return obj.price_breakdown.to_dict()

    def get_check_in_instructions(self, obj: Reservation) -> str | None:
        request = self.context.get("request")
        user_id = getattr(getattr(request, "user", None), "id", None)
        if obj.party_of(user_id) is None:
            return None
        if obj.effective_status() not in (ReservationStatus.CONFIRMED, ReservationStatus.COMPLETED):
            return None
        return obj.check_in_instructions or None


class ReservationDetailSerializer(ReservationSerializer):
    status_history = ReservationStatusChangeSerializer(many=True, read_only=True)

    class Meta(ReservationSerializer.Meta):
        fields = ReservationSerializer.Meta.fields + ["status_history"]
        read_only_fields = fields


class PriceQuoteSerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
