"""Review submission and gated reads."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import QuerySet  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.domain.state_machine import Party, ReservationStatus
from apps.bookings.models import Reservation
from shared.domain.errors import Forbidden, InvalidRequest, NotFound, ReviewAlreadySubmitted

from .models import Review
from .visibility import disclosed, readable_by

logger = logging.getLogger(__name__)


def submit_review(
    reservation_id: UUID,
    author_id: int,
    rating: int,
    public_comment: str = '',
    private_feedback: str = '',
    *,
    today: Optional[date] = None,
) -> Review:
    """Store the author's review of the other party of a completed stay."""

    try:
        reservation = Reservation.objects.get(pk=reservation_id)
    except (Reservation.DoesNotExist, ValueError, ValidationError):
        raise NotFound(f"Reservation {reservation_id} not found.")

    party = reservation.party_of(author_id)
    if party is None:
        raise Forbidden("Only the guest or the host of this reservation may review it.")

    if reservation.effective_status(today) != ReservationStatus.COMPLETED:
        raise Forbidden("Reviews can be submitted only after the stay is completed.")

    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidRequest("Rating must be an integer between 1 and 5.")

    if Review.objects.filter(reservation=reservation, author_id=author_id).exists():
        raise ReviewAlreadySubmitted("You have already reviewed this stay.")

    try:
        with transaction.atomic():
            review = Review.objects.create(
                reservation=reservation,
                property_id=reservation.property_id,
                author_id=author_id,
                subject_id=reservation.counterpart_of(author_id),
                author_role=Review.AuthorRole.GUEST if party == Party.GUEST else Review.AuthorRole.HOST,
                rating=rating,
                public_comment=public_comment or '',
                private_feedback=private_feedback or '',
            )
    except IntegrityError:
        # Lost a race against a concurrent submission by the same author
        raise ReviewAlreadySubmitted("You have already reviewed this stay.")

    logger.info(f"Review {review.pk} submitted by {party.value} on reservation {reservation.reservation_code}")
    return review


def _base_queryset() -> QuerySet:
    return Review.objects.select_related('reservation', 'author', 'subject')


def reviews_for_reservation(reservation_id: UUID, reader_id: Optional[int], today: Optional[date] = None) -> QuerySet:
    return readable_by(_base_queryset().filter(reservation_id=reservation_id), reader_id, today)


def reviews_for_property(property_id: int, today: Optional[date] = None) -> QuerySet:
    """Disclosed reviews written by guests about their stay."""
    queryset = _base_queryset().filter(property_id=property_id, author_role=Review.AuthorRole.GUEST)
    return disclosed(queryset, today)


def reviews_about_user(subject_id: int, today: Optional[date] = None) -> QuerySet:
    return disclosed(_base_queryset().filter(subject_id=subject_id), today)


def readable_reviews(reader_id: Optional[int], today: Optional[date] = None) -> QuerySet:
    return readable_by(_base_queryset(), reader_id, today)
