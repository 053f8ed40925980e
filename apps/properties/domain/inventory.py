"""
Inventory Aggregate

This is the CRITICAL aggregate for preventing double bookings.
All date allocations of a property are evaluated here; the ledger service
loads it under a property-scoped lock and persists what it decides.

A calendar day is ``free`` when no allocation covers it, ``held`` while a
pending reservation or a manual host block covers it, and ``booked`` while
a confirmed reservation covers it.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List
from uuid import UUID

from shared.domain.errors import ConflictingRange
from shared.domain.value_objects import DateRange


class DayStatus(str, Enum):
    FREE = 'free'
    HELD = 'held'
    BOOKED = 'booked'


class AllocationSource(str, Enum):
    RESERVATION = 'reservation'
    MANUAL = 'manual'


@dataclass(frozen=True)
class Allocation:
    """
    A contiguous range of nights owned by one ledger token.
    """
    token: UUID
    dates: DateRange
    status: DayStatus
    source: AllocationSource
    reservation_id: UUID | None = None

    def to_conflict(self) -> ConflictingRange:
        return ConflictingRange(
            start_date=self.dates.start_date,
            end_date=self.dates.end_date,
            status=self.status.value,
            source=self.source.value,
            reservation_id=self.reservation_id,
        )


@dataclass(frozen=True)
class CalendarDay:
    day: date
    status: DayStatus
    source: AllocationSource | None = None
    reservation_id: UUID | None = None

    def to_dict(self) -> dict:
        return {
            'date': self.day.isoformat(),
            'status': self.status.value,
            'source': self.source.value if self.source else None,
        }


@dataclass
class Inventory:
    """
    Inventory Aggregate Root

    Key invariants:
    - No overlapping allocations for the same property
    - Every allocation has a valid (non-empty) date range
    """

    property_id: int
    allocations: List[Allocation] = field(default_factory=list)

    def conflicts_with(self, dates: DateRange) -> List[Allocation]:
        """All allocations sharing at least one night with ``dates``"""
        return [a for a in self.allocations if a.dates.overlaps_with(dates)]

    def can_allocate(self, dates: DateRange) -> bool:
        return not self.conflicts_with(dates)

    def allocation_on(self, day: date) -> Allocation | None:
        return next((a for a in self.allocations if a.dates.contains(day)), None)

    def status_on(self, day: date) -> CalendarDay:
        allocation = self.allocation_on(day)
        if allocation is None:
            return CalendarDay(day, DayStatus.FREE)
        return CalendarDay(day, allocation.status, allocation.source, allocation.reservation_id)

    def calendar(self, dates: DateRange) -> List[CalendarDay]:
        return [self.status_on(day) for day in dates.days()]

    def __str__(self):
        return f"Inventory(property={self.property_id}, allocations={len(self.allocations)})"
