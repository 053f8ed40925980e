"""
Domain error taxonomy

Every business-rule failure raised by the booking core derives from
``DomainError`` and carries a stable ``code`` plus a human-readable message.
These are deterministic outcomes and are never retried by the core.
Infrastructure failures are deliberately not wrapped here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Sequence
from uuid import UUID


class DomainError(Exception):
    """Base class for business-logic errors surfaced to callers."""

    code = 'domain_error'

    def __init__(self, message: str = '', **extra: Any):
        self.message = message or self.__class__.__doc__ or self.code
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {'code': self.code, 'detail': self.message}
        payload.update(self.extra)
        return payload


class InvalidRange(DomainError):
    """Check-out must be after check-in and satisfy the minimum stay."""
    code = 'invalid_range'


class CapacityExceeded(DomainError):
    """Guest count exceeds the property capacity."""
    code = 'capacity_exceeded'


class InvalidAmount(DomainError):
    """Monetary value is not a non-negative fixed-point amount."""
    code = 'invalid_amount'


@dataclass(frozen=True)
class ConflictingRange:
    """A ledger range that prevented a hold."""
    start_date: date
    end_date: date
    status: str
    source: str
    reservation_id: UUID | None = None

    def to_dict(self) -> dict:
        return {
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'status': self.status,
            'source': self.source,
            'reservation_id': str(self.reservation_id) if self.reservation_id else None,
        }


class DateConflict(DomainError):
    """The requested dates overlap an existing hold or booking."""
    code = 'date_conflict'

    def __init__(self, message: str = '', conflicts: Sequence[ConflictingRange] = ()):
        self.conflicts = list(conflicts)
        super().__init__(message, conflicts=[c.to_dict() for c in self.conflicts])


class InvalidRequest(DomainError):
    """A required field of the request is missing or malformed."""
    code = 'invalid_request'


class Forbidden(DomainError):
    """The acting user may not perform this transition."""
    code = 'forbidden'


class NotFound(DomainError):
    """The referenced reservation or property does not exist."""
    code = 'not_found'


class StaleTransition(DomainError):
    """The reservation changed since it was last observed."""
    code = 'stale_transition'


class ReviewAlreadySubmitted(DomainError):
    """A review for this stay has already been submitted by this author."""
    code = 'review_already_submitted'


class HoldStateError(RuntimeError):
    """
    Raised when a ledger token is used against dates it does not own.

    This is a programming error, not a business outcome.
    """
