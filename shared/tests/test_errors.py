"""Error taxonomy, HTTP mapping and encrypted text."""

from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest
from django.core.exceptions import ImproperlyConfigured

from shared.domain import errors
from shared.infrastructure.encryption import decrypt_string, encrypt_string
from shared.infrastructure.exception_handler import domain_exception_handler, status_for


def test_date_conflict_carries_the_overlapping_ranges():
    reservation_id = uuid4()
    conflict = errors.ConflictingRange(date(2025, 11, 10), date(2025, 11, 13), "booked", "reservation", reservation_id)

    payload = errors.DateConflict("Busy", conflicts=[conflict]).to_dict()

    assert payload["code"] == "date_conflict"
    assert payload["conflicts"] == [{
        "start_date": "2025-11-10",
        "end_date": "2025-11-13",
        "status": "booked",
        "source": "reservation",
        "reservation_id": str(reservation_id),
    }]


@pytest.mark.parametrize(
    "error, expected",
    [
        (errors.InvalidRange(), 400),
        (errors.CapacityExceeded(), 400),
        (errors.InvalidAmount(), 400),
        (errors.InvalidRequest(), 400),
        (errors.Forbidden(), 403),
        (errors.NotFound(), 404),
        (errors.DateConflict(), 409),
        (errors.StaleTransition(), 409),
        (errors.ReviewAlreadySubmitted(), 409),
    ],
)
def test_http_status_per_error(error, expected):
    assert status_for(error) == expected
    assert domain_exception_handler(error, {}).status_code == expected


def test_default_message_comes_from_docstring():
    assert errors.NotFound().message == "The referenced reservation or property does not exist."


def test_hold_state_error_is_not_a_domain_error():
    assert not issubclass(errors.HoldStateError, errors.DomainError)


def test_encryption_round_trip_hides_plaintext(settings):
    settings.ENCRYPTION_KEY = "another-test-key"

    token = encrypt_string("Door code 2580")

    assert "2580" not in token
    assert decrypt_string(token) == "Door code 2580"
    assert encrypt_string("") == ""


def test_missing_key_is_a_configuration_error(settings):
    settings.ENCRYPTION_KEY = ""

    with pytest.raises(ImproperlyConfigured):
        encrypt_string("secret")
