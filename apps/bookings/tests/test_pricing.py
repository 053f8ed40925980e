"""Price calculator: pure, no database."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from apps.bookings.domain import pricing
from shared.domain.errors import InvalidAmount, InvalidRange


def test_three_nights_with_cleaning_fee():
    breakdown = pricing.compute(Decimal("100"), Decimal("30"), date(2025, 11, 10), date(2025, 11, 13))

    assert breakdown.nights == 3
    assert breakdown.nightly_total == Decimal("300.00")
    assert breakdown.cleaning_fee == Decimal("30.00")
    assert breakdown.total == Decimal("330.00")


def test_repeated_calls_return_equal_breakdowns():
    args = (100, 30, date(2025, 11, 10), date(2025, 11, 13))

    results = {pricing.compute(*args) for _ in range(5)}

    assert len(results) == 1


def test_missing_cleaning_fee_counts_as_zero():
    breakdown = pricing.compute("85.50", None, date(2025, 12, 1), date(2025, 12, 3))

    assert breakdown.cleaning_fee == Decimal("0.00")
    assert breakdown.total == Decimal("171.00")


def test_breakdown_serialises_amounts_as_strings():
    breakdown = pricing.compute(100, 20, date(2025, 12, 1), date(2025, 12, 4), currency="EUR")

    assert breakdown.to_dict() == {
        "nights": 3,
        "nightly_rate": "100.00",
        "nightly_total": "300.00",
        "cleaning_fee": "20.00",
        "total": "320.00",
        "currency": "EUR",
    }


@pytest.mark.parametrize("check_out", [date(2025, 11, 10), date(2025, 11, 9)])
def test_zero_or_negative_nights_are_rejected(check_out):
    with pytest.raises(InvalidRange):
        pricing.compute(100, 30, date(2025, 11, 10), check_out)


@pytest.mark.parametrize("rate", [100.0, "-1", "12.345", "abc", None, True, "NaN"])
def test_invalid_rates_are_rejected(rate):
    with pytest.raises(InvalidAmount):
        pricing.compute(rate, None, date(2025, 11, 10), date(2025, 11, 12))


def test_partial_day_rounds_up_for_datetimes():
    nights = pricing.count_nights(datetime(2025, 11, 10, 15), datetime(2025, 11, 12, 11))

    assert nights == 2


def test_mixing_dates_and_datetimes_is_a_type_error():
    with pytest.raises(TypeError):
        pricing.count_nights(date(2025, 11, 10), datetime(2025, 11, 12))
