"""
Common Value Objects

Value objects used across multiple domains:
- DateRange: Represents a range of dates (check-in to check-out)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Iterator, List

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for reservation periods, ledger holds and calendar queries.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    @classmethod
    def single_day(cls, day: date) -> 'DateRange':
        return cls(day, day + timedelta(days=1))

    @classmethod
    def coalesce(cls, days: Iterable[date]) -> List['DateRange']:
        """
        Merge loose calendar days into the minimal list of contiguous ranges

        Duplicates are ignored; the result is sorted by start date.
        """
        ranges: List[DateRange] = []
        for day in sorted(set(days)):
            if ranges and ranges[-1].end_date == day:
                ranges[-1] = cls(ranges[-1].start_date, day + timedelta(days=1))
            else:
                ranges.append(cls.single_day(day))
        return ranges

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Two ranges overlap if they share any dates.
        Note: end_date is exclusive, so adjacent ranges don't overlap.

        Examples:
            - DateRange(25, 28) overlaps with DateRange(27, 30) -> True
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        # Overlap formula: start1 < end2 AND end1 > start2
        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    def contains(self, check_date: date) -> bool:
        """
        Check if a date is within this range

        Note: start_date is inclusive, end_date is exclusive
        """
        return self.start_date <= check_date < self.end_date

    def days(self) -> Iterator[date]:
        """Iterate over every night of the range"""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        """
        Return the number of days (nights) in this range
        """
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
