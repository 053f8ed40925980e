"""
Price Calculator

Deterministic price breakdown for a stay. No side effects, no persistence:
the same inputs always give the same snapshot, so a historical
reservation's price can be reproduced from the values stored with it.

All amounts are fixed-point with two decimal places. Floats are refused at
the boundary instead of being coerced; the calculator never converts
currencies.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from shared.domain.base import ValueObject
from shared.domain.errors import InvalidAmount, InvalidRange

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0.00')
DEFAULT_CURRENCY = 'USD'


@dataclass(frozen=True)
class PriceBreakdown(ValueObject):
    nights: int
    nightly_rate: Decimal
    nightly_total: Decimal
    cleaning_fee: Decimal
    total: Decimal
    currency: str = DEFAULT_CURRENCY

    def to_dict(self) -> dict:
        return {
            'nights': self.nights,
            'nightly_rate': str(self.nightly_rate),
            'nightly_total': str(self.nightly_total),
            'cleaning_fee': str(self.cleaning_fee),
            'total': str(self.total),
            'currency': self.currency,
        }


def to_amount(value, field_name: str = 'amount') -> Decimal:
    """
    Validate a monetary input and return it as a two-place Decimal.

    Accepts Decimal, int and numeric strings. Rejects floats, booleans,
    negative or non-finite values and more than two decimal places.
    """
    if value is None or isinstance(value, (bool, float)):
        raise InvalidAmount(f"{field_name} must be a decimal amount, got {type(value).__name__}.")

    try:
        amount = Decimal(value.strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"{field_name} is not a valid amount: {value!r}.")

    if not amount.is_finite() or amount < 0:
        raise InvalidAmount(f"{field_name} must be a non-negative amount.")
    if amount != amount.quantize(TWO_PLACES):
        raise InvalidAmount(f"{field_name} has more than two decimal places.")
    return amount.quantize(TWO_PLACES)


def count_nights(check_in: date, check_out: date) -> int:
    """
    Whole nights between check-in and check-out, rounded up.

    Plain dates give an exact day count; datetimes round a partial day up.
    """
    if isinstance(check_in, datetime) != isinstance(check_out, datetime):
        raise TypeError("check_in and check_out must both be dates or both be datetimes")

    delta = check_out - check_in
    if isinstance(check_in, datetime):
        return math.ceil(delta.total_seconds() / 86400)
    return delta.days


def compute(
    nightly_rate,
    cleaning_fee,
    check_in: date,
    check_out: date,
    *,
    currency: str = DEFAULT_CURRENCY,
) -> PriceBreakdown:
    nights = count_nights(check_in, check_out)
    if nights <= 0:
        raise InvalidRange("Check-out must be after check-in.")

    rate = to_amount(nightly_rate, 'nightly_rate')
    fee = ZERO if cleaning_fee is None else to_amount(cleaning_fee, 'cleaning_fee')
    nightly_total = (rate * nights).quantize(TWO_PLACES)

    return PriceBreakdown(
        nights=nights,
        nightly_rate=rate,
        nightly_total=nightly_total,
        cleaning_fee=fee,
        total=(nightly_total + fee).quantize(TWO_PLACES),
        currency=currency,
    )
