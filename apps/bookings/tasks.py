"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.errors import Forbidden, StaleTransition

from .models import Reservation
from .services import expire_reservation

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_pending_reservations")
def expire_pending_reservations() -> dict[str, int]:
    """
    Cancel pending requests the host never answered.

    A request expires once it is older than PENDING_RESERVATION_TTL_HOURS
    or once its check-in date has arrived. The hold is released through
    the regular ``expire`` transition.

    Runs every 15 minutes via Celery Beat.

    Returns:
        dict: {"expired": number of cancelled requests, "skipped": lost races}
    """
    now = timezone.now()
    cutoff = now - timedelta(hours=settings.PENDING_RESERVATION_TTL_HOURS)
    today = timezone.localdate()
    expired_count = 0
    skipped_count = 0

    candidates = (
        Reservation.objects.filter(status=Reservation.Status.PENDING)
        .filter(Q(created_at__lte=cutoff) | Q(check_in__lte=today))
        .values_list("pk", flat=True)
    )

    for reservation_id in list(candidates):
        try:
            reservation = expire_reservation(reservation_id)
        except (StaleTransition, Forbidden):
            # Host or guest acted between the query and the transition
            skipped_count += 1
            continue

        expired_count += 1
        logger.info(f"Reservation {reservation.reservation_code} expired automatically")

    if expired_count > 0:
        logger.info(f"Expired {expired_count} pending reservations")

    return {"expired": expired_count, "skipped": skipped_count}
