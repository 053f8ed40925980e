"""Shared pytest fixtures: users, a listed villa and a reservation factory."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from apps.bookings import services as booking_services
from apps.bookings.models import Reservation
from apps.properties.models import AvailabilityHold, Property


@pytest.fixture
def make_user(db):
    user_model = get_user_model()

    def factory(username: str):
        return user_model.objects.create_user(
            username=username,
            password="pass",
            email=f"{username}@example.com",
        )

    return factory


@pytest.fixture
def host(make_user):
    return make_user("host")


@pytest.fixture
def guest(make_user):
    return make_user("guest")


@pytest.fixture
def other_guest(make_user):
    return make_user("other_guest")


@pytest.fixture
def villa(host):
    """villa_1: 100/night, cleaning fee 20, minimum two nights, four guests."""
    return Property.objects.create(
        host=host,
        title="villa_1",
        status=Property.Status.LISTED,
        nightly_rate=Decimal("100.00"),
        cleaning_fee=Decimal("20.00"),
        minimum_nights=2,
        capacity=4,
        currency="USD",
    )


@pytest.fixture
def future():
    """Return a date ``days`` from today."""

    def at(days: int) -> date:
        return date.today() + timedelta(days=days)

    return at


@pytest.fixture
def make_reservation(villa, guest):
    def factory(check_in: date, check_out: date, *, user=None, property_obj=None, guests_count: int = 2):
        return booking_services.create_reservation(
            property_id=(property_obj or villa).id,
            guest_id=(user or guest).id,
            check_in=check_in,
            check_out=check_out,
            guests_count=guests_count,
        )

    return factory


@pytest.fixture
def move_stay():
    """Shift a reservation and its ledger range to other dates.

    Accepting needs an upcoming check-in, so past stays are accepted first
    and moved afterwards.
    """

    def move(reservation, check_in: date, check_out: date):
        Reservation.objects.filter(pk=reservation.pk).update(check_in=check_in, check_out=check_out)
        AvailabilityHold.objects.filter(token=reservation.hold_token).update(start_date=check_in, end_date=check_out)
        reservation.refresh_from_db()
        return reservation

    return move
