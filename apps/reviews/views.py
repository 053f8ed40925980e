"""API views for reviews."""

from __future__ import annotations

from uuid import UUID

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.errors import InvalidRequest

from . import services
from .models import Review
from .serializers import ReviewCreateSerializer, ReviewSerializer


class ReviewViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Submit reviews and read the ones the visibility gate discloses.

    Listing requires one of ``reservation``, ``property`` or ``subject``.
    """

    permission_classes = [permissions.IsAuthenticatedOrReadOnly]

    def get_serializer_class(self):  # type: ignore
        if self.action == 'create':
            return ReviewCreateSerializer
        return ReviewSerializer

    def _reader_id(self):
        user = self.request.user
        return user.id if user.is_authenticated else None

    def get_queryset(self):  # type: ignore
        if getattr(self, 'swagger_fake_view', False):
            return Review.objects.none()
        if self.action != 'list':
            return services.readable_reviews(self._reader_id())

        params = self.request.query_params
        if params.get('reservation'):
            return services.reviews_for_reservation(self._uuid_param('reservation'), self._reader_id())
        if params.get('property'):
            return services.reviews_for_property(self._int_param('property'))
        if params.get('subject'):
            return services.reviews_about_user(self._int_param('subject'))
        raise InvalidRequest("Pass one of the reservation, property or subject filters.")

    def _uuid_param(self, name: str) -> UUID:
        try:
            return UUID(self.request.query_params[name])
        except ValueError:
            raise InvalidRequest(f"{name} must be a reservation id.")

    def _int_param(self, name: str) -> int:
        try:
            return int(self.request.query_params[name])
        except ValueError:
            raise InvalidRequest(f"{name} must be an integer.")

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        review = services.submit_review(
            data['reservation'],
            request.user.id,
            data['rating'],
            data['public_comment'],
            data['private_feedback'],
        )
        read = ReviewSerializer(review, context=self.get_serializer_context())
        return Response(read.data, status=status.HTTP_201_CREATED)
