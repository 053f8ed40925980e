"""
Property terms

Snapshot of the listing fields the booking core reads once per request.
Later changes on the listing never reach an existing reservation.
"""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class PropertyTerms(ValueObject):
    property_id: int
    host_id: int
    nightly_rate: Decimal
    cleaning_fee: Decimal | None
    minimum_nights: int
    capacity: int
    currency: str
    is_bookable: bool = True
