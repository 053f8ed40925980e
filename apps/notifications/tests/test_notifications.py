"""Inbox entries created from reservation events after commit."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from apps.bookings import services as booking_services
from apps.notifications.models import Notification
from shared.domain.errors import DateConflict


def _day(offset: int) -> date:
    return date.today() + timedelta(days=30 + offset)


@pytest.mark.django_db
def test_events_notify_the_counterparty(host, guest, make_reservation, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        reservation = make_reservation(_day(1), _day(4))
    with django_capture_on_commit_callbacks(execute=True):
        booking_services.accept_reservation(reservation.id, host.id)
    with django_capture_on_commit_callbacks(execute=True):
        booking_services.cancel_reservation(reservation.id, host.id, "Roof repair")

    host_inbox = list(Notification.objects.filter(user=host).values_list("event", flat=True))
    guest_inbox = list(Notification.objects.filter(user=guest).order_by("id").values_list("event", flat=True))

    assert host_inbox == ["reservation_created"]
    assert guest_inbox == ["reservation_accepted", "reservation_cancelled"]
    cancelled = Notification.objects.get(user=guest, event="reservation_cancelled")
    assert "Roof repair" in cancelled.message
    assert cancelled.payload["cancelled_by"] == "host"
    assert cancelled.reservation_id == reservation.id


@pytest.mark.django_db
def test_nothing_is_published_when_the_transaction_fails(guest, other_guest, make_reservation,
                                                         django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        make_reservation(_day(1), _day(4))

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(DateConflict):
            make_reservation(_day(2), _day(5), user=other_guest)

    assert callbacks == []
    assert Notification.objects.count() == 1


@pytest.mark.django_db
def test_expiry_notifies_both_parties(host, guest, make_reservation, django_capture_on_commit_callbacks):
    reservation = make_reservation(_day(1), _day(4))

    with django_capture_on_commit_callbacks(execute=True):
        booking_services.expire_reservation(reservation.id)

    assert set(Notification.objects.values_list("user_id", flat=True)) == {host.id, guest.id}


@pytest.mark.django_db
def test_inbox_lists_own_entries_and_marks_read(host, guest, make_reservation, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        make_reservation(_day(1), _day(4))
    client = APIClient()

    client.force_authenticate(guest)
    assert client.get(reverse("notification-list")).data == []

    client.force_authenticate(host)
    inbox = client.get(reverse("notification-list")).data
    assert len(inbox) == 1 and inbox[0]["is_read"] is False

    response = client.post(reverse("notification-read", args=[inbox[0]["id"]]))
    assert response.status_code == 200
    assert response.data["is_read"] is True
    assert client.get(reverse("notification-list"), {"unread": "true"}).data == []
