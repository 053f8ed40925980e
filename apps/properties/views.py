"""Property API views: calendar, host blocking and price quotes."""

from __future__ import annotations

from datetime import timedelta

from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings import services as booking_services
from apps.bookings.serializers import PriceQuoteSerializer
from shared.domain.errors import Forbidden, NotFound
from shared.domain.value_objects import DateRange

from . import services as ledger
from .models import AvailabilityHold, Property
from .serializers import (
    AvailabilityHoldSerializer,
    CalendarDatesSerializer,
    CalendarDaySerializer,
    CalendarQuerySerializer,
)


class PropertyHostMixin:
    """Resolves the property from the URL and checks the user is its host."""

    property_lookup_url_kwarg = "property_id"
    permission_classes = [permissions.IsAuthenticated]

    def get_property(self) -> Property:
        property_id = self.kwargs[self.property_lookup_url_kwarg]  # type: ignore
        try:
            property_obj = Property.objects.get(pk=property_id)
        except Property.DoesNotExist:
            raise NotFound(f"Property {property_id} not found.")
        if property_obj.host_id != self.request.user.id:  # type: ignore
            raise Forbidden("Only the host may change this calendar.")
        return property_obj

    def _dates(self, request) -> dict:
        serializer = CalendarDatesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data


class PropertyCalendarView(APIView):
    """Per-night availability of a property. Public."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, property_id):  # type: ignore
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        date_from = query.validated_data["date_from"]
        date_to = query.validated_data["date_to"]

        days = ledger.get_calendar(property_id, DateRange(date_from, date_to + timedelta(days=1)))
        return Response(
            {
                "property_id": property_id,
                "date_from": date_from,
                "date_to": date_to,
                "dates": CalendarDaySerializer(days, many=True).data,
            }
        )


class PropertyCalendarBlockView(PropertyHostMixin, APIView):
    def post(self, request, property_id):  # type: ignore
        property_obj = self.get_property()
        data = self._dates(request)
        tokens = ledger.block_dates(
            property_obj.id,
            data["dates"],
            reason=data["reason"],
            created_by=request.user,
        )
        holds = AvailabilityHold.objects.filter(token__in=[token.token for token in tokens])
        return Response(
            {"blocks": AvailabilityHoldSerializer(holds, many=True).data},
            status=status.HTTP_201_CREATED if tokens else status.HTTP_200_OK,
        )


class PropertyCalendarUnblockView(PropertyHostMixin, APIView):
    def post(self, request, property_id):  # type: ignore
        property_obj = self.get_property()
        data = self._dates(request)
        freed = ledger.unblock_dates(property_obj.id, data["dates"])
        return Response({"freed": freed})


class PropertyQuoteView(APIView):
    """Price breakdown for a stay with the property's current terms."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, property_id):  # type: ignore
        query = PriceQuoteSerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        breakdown = booking_services.quote(
            property_id,
            query.validated_data["check_in"],
            query.validated_data["check_out"],
        )
        return Response(breakdown.to_dict())
