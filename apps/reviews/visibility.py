"""
Review visibility gate

A review's public fields are disclosed once both parties of the
reservation have submitted, or once the disclosure period after
check-out has elapsed, whichever comes first. Before that the review is
readable by its author only and otherwise treated as absent.

Evaluated at read time; nothing is stored.
"""

from datetime import date, timedelta
from typing import Optional

from django.conf import settings
from django.db.models import Exists, OuterRef, Q, QuerySet
from django.utils import timezone


def disclosure_days() -> int:
    return settings.REVIEW_DISCLOSURE_DAYS


def is_visible(
    guest_review_exists: bool,
    host_review_exists: bool,
    check_out: date,
    today: date,
    days: Optional[int] = None,
) -> bool:
    days = disclosure_days() if days is None else days
    if guest_review_exists and host_review_exists:
        return True
    return (today - check_out) >= timedelta(days=days)


def disclosed(queryset: QuerySet, today: Optional[date] = None) -> QuerySet:
    """Restrict a Review queryset to reviews any reader may see."""
    from .models import Review

    today = today or timezone.localdate()
    cutoff = today - timedelta(days=disclosure_days())
    counterpart = Review.objects.filter(reservation_id=OuterRef('reservation_id')).exclude(
        author_id=OuterRef('author_id')
    )
    return queryset.annotate(counterpart_submitted=Exists(counterpart)).filter(
        Q(counterpart_submitted=True) | Q(reservation__check_out__lte=cutoff)
    )


def readable_by(queryset: QuerySet, reader_id: Optional[int], today: Optional[date] = None) -> QuerySet:
    """Disclosed reviews plus the reader's own submissions."""
    visible = disclosed(queryset, today)
    if reader_id is None:
        return visible
    own = queryset.filter(author_id=reader_id)
    return queryset.filter(Q(pk__in=visible.values('pk')) | Q(pk__in=own.values('pk')))
