"""Availability ledger operations against the database."""

from __future__ import annotations

import threading
from datetime import date, timedelta
from unittest import mock
from uuid import uuid4

import pytest
from django.db import connection
from django.db.models import QuerySet

from apps.bookings import services as booking_services
from apps.properties import services as ledger
from apps.properties.domain.inventory import DayStatus
from apps.properties.models import AvailabilityHold, Property
from shared.domain.errors import DateConflict, HoldStateError, NotFound
from shared.domain.value_objects import DateRange

NOV_10 = date(2025, 11, 10)


def _range(start: date, nights: int) -> DateRange:
    return DateRange(start, start + timedelta(days=nights))


def _statuses(villa, start: date, nights: int) -> list[str]:
    return [day.status.value for day in ledger.get_calendar(villa.id, _range(start, nights))]


@pytest.mark.django_db
def test_try_hold_marks_nights_held(villa):
    token = ledger.try_hold(villa.id, _range(NOV_10, 3), reservation_id=uuid4())

    assert token.dates == _range(NOV_10, 3)
    assert _statuses(villa, NOV_10, 4) == ["held", "held", "held", "free"]


@pytest.mark.django_db
def test_overlapping_hold_conflicts_without_mutation(villa):
    first = ledger.try_hold(villa.id, _range(NOV_10, 3), reservation_id=uuid4())
    ledger.commit(first)
    rows_before = list(AvailabilityHold.objects.values_list("token", "start_date", "end_date", "status"))

    with pytest.raises(DateConflict) as excinfo:
        ledger.try_hold(villa.id, DateRange(date(2025, 11, 12), date(2025, 11, 15)))

    assert excinfo.value.conflicts[0].reservation_id == first.reservation_id
    assert excinfo.value.conflicts[0].status == "booked"
    assert list(AvailabilityHold.objects.values_list("token", "start_date", "end_date", "status")) == rows_before


@pytest.mark.django_db
def test_back_to_back_holds_are_allowed(villa):
    ledger.try_hold(villa.id, _range(NOV_10, 3))
    ledger.try_hold(villa.id, _range(NOV_10 + timedelta(days=3), 2))

    assert _statuses(villa, NOV_10, 5) == ["held"] * 5


@pytest.mark.django_db
def test_holds_on_different_properties_are_independent(villa, host):
    other = type(villa).objects.create(host=host, title="villa_2", nightly_rate=80, status="listed")

    ledger.try_hold(villa.id, _range(NOV_10, 3))
    ledger.try_hold(other.id, _range(NOV_10, 3))

    assert AvailabilityHold.objects.count() == 2


@pytest.mark.django_db
def test_commit_turns_held_into_booked(villa):
    token = ledger.try_hold(villa.id, _range(NOV_10, 2))

    ledger.commit(token)

    assert _statuses(villa, NOV_10, 2) == ["booked", "booked"]


@pytest.mark.django_db
def test_commit_twice_is_a_programming_error(villa):
    token = ledger.try_hold(villa.id, _range(NOV_10, 2))
    ledger.commit(token)

    with pytest.raises(HoldStateError):
        ledger.commit(token)


@pytest.mark.django_db
def test_commit_of_released_token_is_a_programming_error(villa):
    token = ledger.try_hold(villa.id, _range(NOV_10, 2))
    ledger.release(token)

    with pytest.raises(HoldStateError):
        ledger.commit(token.token)


@pytest.mark.django_db
def test_release_is_idempotent(villa):
    token = ledger.try_hold(villa.id, _range(NOV_10, 3))
    ledger.commit(token)

    assert ledger.release(token) == 1
    after_first = _statuses(villa, NOV_10, 3)
    assert ledger.release(token) == 0

    assert _statuses(villa, NOV_10, 3) == after_first == ["free"] * 3


@pytest.mark.django_db
def test_hold_on_unknown_property_is_not_found():
    with pytest.raises(NotFound):
        ledger.try_hold(999_999, _range(NOV_10, 2))


@pytest.mark.django_db
def test_block_dates_coalesces_and_skips_existing_blocks(villa, host):
    ledger.block_dates(villa.id, [NOV_10], created_by=host)

    tokens = ledger.block_dates(
        villa.id,
        [NOV_10, NOV_10 + timedelta(days=1), NOV_10 + timedelta(days=2), NOV_10 + timedelta(days=5)],
        reason="maintenance",
    )

    assert [token.dates for token in tokens] == [
        DateRange(NOV_10 + timedelta(days=1), NOV_10 + timedelta(days=3)),
        _range(NOV_10 + timedelta(days=5), 1),
    ]
    calendar = ledger.get_calendar(villa.id, _range(NOV_10, 6))
    assert [day.status for day in calendar] == [DayStatus.HELD] * 3 + [DayStatus.FREE] * 2 + [DayStatus.HELD]
    assert {day.source.value for day in calendar if day.source} == {"manual"}


@pytest.mark.django_db
def test_block_over_reservation_is_all_or_nothing(villa):
    reservation_hold = ledger.try_hold(villa.id, _range(NOV_10 + timedelta(days=2), 2), reservation_id=uuid4())

    with pytest.raises(DateConflict) as excinfo:
        ledger.block_dates(villa.id, [NOV_10, NOV_10 + timedelta(days=2)])

    assert excinfo.value.conflicts[0].reservation_id == reservation_hold.reservation_id
    assert AvailabilityHold.objects.filter(source=AvailabilityHold.Source.MANUAL).count() == 0


@pytest.mark.django_db
def test_blocked_nights_refuse_holds(villa):
    ledger.block_dates(villa.id, [NOV_10 + timedelta(days=1)])

    with pytest.raises(DateConflict) as excinfo:
        ledger.try_hold(villa.id, _range(NOV_10, 3))

    assert excinfo.value.conflicts[0].source == "manual"
    assert excinfo.value.conflicts[0].reservation_id is None


@pytest.mark.django_db
def test_unblock_splits_a_manual_block(villa):
    ledger.block_dates(villa.id, [NOV_10 + timedelta(days=offset) for offset in range(5)], reason="renovation")

    freed = ledger.unblock_dates(villa.id, [NOV_10 + timedelta(days=2)])

    assert freed == 1
    assert _statuses(villa, NOV_10, 5) == ["held", "held", "free", "held", "held"]
    assert set(AvailabilityHold.objects.values_list("reason", flat=True)) == {"renovation"}


@pytest.mark.django_db
def test_unblock_never_frees_reservation_holds(villa):
    ledger.try_hold(villa.id, _range(NOV_10, 2), reservation_id=uuid4())

    assert ledger.unblock_dates(villa.id, [NOV_10, NOV_10 + timedelta(days=1)]) == 0
    assert _statuses(villa, NOV_10, 2) == ["held", "held"]


@pytest.mark.django_db
def test_try_hold_locks_the_property_row_inside_the_transaction(villa):
    locked = []
    select_for_update = QuerySet.select_for_update

    def recording(queryset, *args, **kwargs):
        locked.append((queryset.model, connection.in_atomic_block))
        return select_for_update(queryset, *args, **kwargs)

    with mock.patch.object(QuerySet, "select_for_update", recording):
        ledger.try_hold(villa.id, _range(NOV_10, 3))

    assert locked == [(Property, True)]


@pytest.mark.django_db(transaction=True)
def test_concurrent_overlapping_requests_admit_exactly_one(villa, guest, other_guest):
    if not connection.features.has_select_for_update:
        pytest.skip("row locks need a server database such as PostgreSQL")

    check_in = date.today() + timedelta(days=30)
    barrier = threading.Barrier(2)
    outcomes = []

    def request(user, start):
        try:
            barrier.wait(timeout=5)
            booking_services.create_reservation(villa.id, user.id, start, start + timedelta(days=3), 2)
            outcomes.append("created")
        except DateConflict:
            outcomes.append("conflict")
        finally:
            connection.close()

    threads = [
        threading.Thread(target=request, args=(guest, check_in)),
        threading.Thread(target=request, args=(other_guest, check_in + timedelta(days=1))),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes) == ["conflict", "created"]
    assert AvailabilityHold.objects.filter(property=villa).count() == 1
