"""Availability ledger.

The single source of truth for whether a property is free over a date
range, and the only code allowed to change the status of calendar nights.

Every check-and-mark operation runs inside ``transaction.atomic`` after
locking the property row (``SELECT ... FOR UPDATE``), so concurrent holds
on the same property are serialised while different properties never
contend. On backends without row locks (SQLite) the database-level write
lock gives the same serialisation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List
from uuid import UUID

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.errors import DateConflict, HoldStateError, NotFound
from shared.domain.value_objects import DateRange

from .domain.inventory import AllocationSource, CalendarDay, DayStatus, Inventory
from .models import AvailabilityHold, Property

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HoldToken:
    """Reference to the ledger range owned by a reservation or a manual block."""

    token: UUID
    property_id: int
    dates: DateRange
    reservation_id: UUID | None = None


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _lock_property(property_id: int) -> Property:
    try:
        return _lock_queryset_if_possible(Property.objects.filter(pk=property_id)).get()
    except Property.DoesNotExist:
        raise NotFound(f"Property {property_id} not found.")


def _load_inventory(property_id: int, window: DateRange | None = None) -> Inventory:
    holds = AvailabilityHold.objects.filter(property_id=property_id)
    if window is not None:
        holds = holds.filter(start_date__lt=window.end_date, end_date__gt=window.start_date)
    return Inventory(property_id=property_id, allocations=[hold.to_allocation() for hold in holds])


def _token_value(token: HoldToken | UUID) -> UUID:
    return token.token if isinstance(token, HoldToken) else token


@transaction.atomic
def try_hold(property_id: int, dates: DateRange, *, reservation_id: UUID | None = None) -> HoldToken:
    """Mark every night of ``dates`` as held, or raise ``DateConflict`` without mutating anything."""

    _lock_property(property_id)
    inventory = _load_inventory(property_id, dates)

    conflicts = inventory.conflicts_with(dates)
    if conflicts:
        logger.info(
            f"Hold refused for property {property_id} {dates}: "
            f"{len(conflicts)} overlapping range(s)"
        )
        raise DateConflict(
            f"Property {property_id} is not available for {dates}.",
            conflicts=[allocation.to_conflict() for allocation in conflicts],
        )

    hold = AvailabilityHold.objects.create(
        property_id=property_id,
        start_date=dates.start_date,
        end_date=dates.end_date,
        status=AvailabilityHold.HoldStatus.HELD,
        source=AvailabilityHold.Source.RESERVATION,
        reservation_id=reservation_id,
    )
    logger.debug(f"Held {dates} on property {property_id} (token {hold.token})")
    return HoldToken(hold.token, property_id, dates, reservation_id)


@transaction.atomic
def commit(token: HoldToken | UUID) -> None:
    """Turn the held nights of ``token`` into booked nights."""

    value = _token_value(token)
    holds = list(_lock_queryset_if_possible(AvailabilityHold.objects.filter(token=value)))
    if not holds:
        raise HoldStateError(f"Ledger token {value} owns no dates.")
    not_held = [hold for hold in holds if hold.status != AvailabilityHold.HoldStatus.HELD]
    if not_held:
        raise HoldStateError(f"Ledger token {value} is not held (status {not_held[0].status}).")

    AvailabilityHold.objects.filter(token=value).update(
        status=AvailabilityHold.HoldStatus.BOOKED,
        updated_at=timezone.now(),
    )
    logger.debug(f"Committed ledger token {value}")


@transaction.atomic
def release(token: HoldToken | UUID) -> int:
    """Free every night owned by ``token``. Releasing a free range is a no-op."""

    value = _token_value(token)
    deleted, _ = AvailabilityHold.objects.filter(token=value).delete()
    if deleted:
        logger.debug(f"Released ledger token {value}")
    return deleted


@transaction.atomic
def block_dates(
    property_id: int,
    dates: Iterable[date],
    *,
    reason: str = "",
    created_by=None,
) -> List[HoldToken]:
    """
    Manually hold nights on behalf of the host.

    All-or-nothing: a night held or booked by a reservation raises
    ``DateConflict``. Nights that are already blocked are skipped.
    """

    days = set(dates)
    if not days:
        return []

    _lock_property(property_id)
    ranges = DateRange.coalesce(days)
    window = DateRange(ranges[0].start_date, ranges[-1].end_date)
    inventory = _load_inventory(property_id, window)

    conflicts = {}
    for requested in ranges:
        for allocation in inventory.conflicts_with(requested):
            if allocation.source == AllocationSource.RESERVATION:
                conflicts[allocation.token] = allocation
    if conflicts:
        raise DateConflict(
            f"Property {property_id} has reservations on the requested dates.",
            conflicts=[allocation.to_conflict() for allocation in conflicts.values()],
        )

    free_days = [day for day in days if inventory.status_on(day).status == DayStatus.FREE]
    tokens = []
    for block in DateRange.coalesce(free_days):
        hold = AvailabilityHold.objects.create(
            property_id=property_id,
            start_date=block.start_date,
            end_date=block.end_date,
            status=AvailabilityHold.HoldStatus.HELD,
            source=AvailabilityHold.Source.MANUAL,
            reason=reason,
            created_by=created_by,
        )
        tokens.append(HoldToken(hold.token, property_id, block))

    logger.info(f"Blocked {len(free_days)} night(s) on property {property_id}")
    return tokens


@transaction.atomic
def unblock_dates(property_id: int, dates: Iterable[date]) -> int:
    """
    Free manually blocked nights. Reservation holds are never touched.

    Returns the number of nights that became free.
    """

    days = set(dates)
    if not days:
        return 0

    _lock_property(property_id)
    ranges = DateRange.coalesce(days)
    manual_holds = list(AvailabilityHold.objects.filter(
        property_id=property_id,
        source=AvailabilityHold.Source.MANUAL,
        start_date__lt=ranges[-1].end_date,
        end_date__gt=ranges[0].start_date,
    ))

    freed = 0
    for hold in manual_holds:
        covered = set(hold.dates.days())
        to_free = covered & days
        if not to_free:
            continue
        remaining = covered - to_free
        for block in DateRange.coalesce(remaining):
            AvailabilityHold.objects.create(
                property_id=property_id,
                start_date=block.start_date,
                end_date=block.end_date,
                status=hold.status,
                source=hold.source,
                reason=hold.reason,
                created_by_id=hold.created_by_id,
            )
        hold.delete()
        freed += len(to_free)

    logger.info(f"Unblocked {freed} night(s) on property {property_id}")
    return freed


def get_calendar(property_id: int, dates: DateRange) -> List[CalendarDay]:
    """Per-night status of the property over ``dates``."""

    if not Property.objects.filter(pk=property_id).exists():
        raise NotFound(f"Property {property_id} not found.")
    return _load_inventory(property_id, dates).calendar(dates)


def is_free(property_id: int, dates: DateRange) -> bool:
    return _load_inventory(property_id, dates).can_allocate(dates)
