"""API views for the booking domain."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.pagination import LimitOffsetPagination  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .filters import ReservationFilter
from .serializers import (
    AcceptReservationSerializer,
    CancelReservationSerializer,
    DeclineReservationSerializer,
    ReservationCreateSerializer,
    ReservationDetailSerializer,
    ReservationSerializer,
    WithdrawReservationSerializer,
)


class ReservationPagination(LimitOffsetPagination):
    default_limit = 20

    @property
    def max_limit(self) -> int:  # type: ignore
        return settings.RESERVATION_LIST_MAX_LIMIT


class ReservationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Reservations of the authenticated user, as guest or as host.

    Status changes go through the lifecycle actions; reservations are never
    edited or deleted directly.
    """

    permission_classes = [permissions.IsAuthenticated]
    pagination_class = ReservationPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = ReservationFilter

    def get_queryset(self):  # type: ignore
        return services.reservations_for(self.request.user.id)

    def get_serializer_class(self):  # type: ignore
        serializers_by_action = {
            "create": ReservationCreateSerializer,
            "retrieve": ReservationDetailSerializer,
            "accept": AcceptReservationSerializer,
            "decline": DeclineReservationSerializer,
            "withdraw": WithdrawReservationSerializer,
            "cancel": CancelReservationSerializer,
        }
        return serializers_by_action.get(self.action, ReservationSerializer)

    def get_object(self):  # type: ignore
        return services.get_reservation(self.kwargs["pk"], self.request.user.id)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        reservation = services.create_reservation(
            property_id=data["property"],
            guest_id=request.user.id,
            check_in=data["check_in"],
            check_out=data["check_out"],
            guests_count=data["guests_count"],
            message=data["message"],
        )
        return self._respond(reservation, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):  # type: ignore
        data = self._validated(request)
        reservation = services.accept_reservation(
            pk,
            request.user.id,
            check_in_instructions=data["check_in_instructions"],
            expected_status=data.get("expected_status"),
        )
        return self._respond(reservation)

    @action(detail=True, methods=["post"])
    def decline(self, request, pk=None):  # type: ignore
        data = self._validated(request)
        reservation = services.decline_reservation(
            pk,
            request.user.id,
            data["reason"],
            expected_status=data.get("expected_status"),
        )
        return self._respond(reservation)

    @action(detail=True, methods=["post"])
    def withdraw(self, request, pk=None):  # type: ignore
        data = self._validated(request)
        reservation = services.withdraw_reservation(
            pk,
            request.user.id,
            expected_status=data.get("expected_status"),
        )
        return self._respond(reservation)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        data = self._validated(request)
        reservation = services.cancel_reservation(
            pk,
            request.user.id,
            data["message"],
            expected_status=data.get("expected_status"),
        )
        return self._respond(reservation)

    def _validated(self, request) -> dict:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    def _respond(self, reservation, status_code=status.HTTP_200_OK) -> Response:
        data = ReservationSerializer(reservation, context=self.get_serializer_context()).data
        return Response(data, status=status_code)
