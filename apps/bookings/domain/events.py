"""
Reservation Domain Events

Logical events emitted by the lifecycle manager. They are published after
the transaction commits; the messaging layer decides how (and whether) to
tell the other party.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange


@dataclass(kw_only=True)
class ReservationEvent(DomainEvent):
    reservation_id: UUID
    reservation_code: str
    property_id: int
    guest_id: int
    host_id: int
    dates: DateRange

    def recipients(self) -> List[int]:
        """Users that should hear about this event"""
        return []

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload.update({
            'reservation_id': str(self.reservation_id),
            'reservation_code': self.reservation_code,
            'property_id': self.property_id,
            'guest_id': self.guest_id,
            'host_id': self.host_id,
            'check_in': self.dates.start_date.isoformat(),
            'check_out': self.dates.end_date.isoformat(),
        })
        return payload


@dataclass(kw_only=True)
class ReservationCreated(ReservationEvent):
    """
    Event: A guest requested a stay (-> PENDING)

    The host has to accept or decline.
    """
    name = 'reservation_created'

    guests_count: int
    total_price: Decimal
    currency: str

    def recipients(self) -> List[int]:
        return [self.host_id]

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload.update({
            'guests_count': self.guests_count,
            'total_price': str(self.total_price),
            'currency': self.currency,
        })
        return payload


@dataclass(kw_only=True)
class ReservationAccepted(ReservationEvent):
    """Event: The host accepted the request (PENDING -> CONFIRMED)"""
    name = 'reservation_accepted'

    def recipients(self) -> List[int]:
        return [self.guest_id]


@dataclass(kw_only=True)
class ReservationDeclined(ReservationEvent):
    """Event: The host declined the request (PENDING -> CANCELLED)"""
    name = 'reservation_declined'

    reason: str

    def recipients(self) -> List[int]:
        return [self.guest_id]

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload['reason'] = self.reason
        return payload


@dataclass(kw_only=True)
class ReservationCancelled(ReservationEvent):
    """
    Event: The reservation was cancelled

    Covers a guest withdrawing a pending request, either party cancelling a
    confirmed stay, and the system expiring an unanswered request.
    """
    name = 'reservation_cancelled'

    cancelled_by: str
    previous_status: str
    message: str = ''

    def recipients(self) -> List[int]:
        if self.cancelled_by == 'guest':
            return [self.host_id]
        if self.cancelled_by == 'host':
            return [self.guest_id]
        return [self.guest_id, self.host_id]

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload.update({
            'cancelled_by': self.cancelled_by,
            'previous_status': self.previous_status,
            'message': self.message,
        })
        return payload
