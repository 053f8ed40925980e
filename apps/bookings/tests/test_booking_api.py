"""Integration tests for reservation API endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Reservation
from apps.properties import services as ledger
from apps.properties.models import Property

User = get_user_model()


class ReservationAPITests(APITestCase):
    """Covers creation, conflicts and the lifecycle actions."""

    def setUp(self) -> None:
        self.guest = User.objects.create_user(username="guest", email="guest@example.com", password="GuestPass123")
        self.other_guest = User.objects.create_user(
            username="other", email="other@example.com", password="OtherPass123"
        )
        self.host = User.objects.create_user(username="host", email="host@example.com", password="HostPass123")
        self.property = Property.objects.create(
            host=self.host,
            title="Sea view villa",
            description="Three bedrooms above the bay.",
            status=Property.Status.LISTED,
            nightly_rate=Decimal("100.00"),
            cleaning_fee=Decimal("20.00"),
            minimum_nights=2,
            capacity=4,
        )
        self.client.force_authenticate(self.guest)
        self.list_url = reverse("reservation-list")

    def _payload(self, check_in: date, check_out: date, **extra) -> dict:
        payload = {
            "property": self.property.id,
            "check_in": str(check_in),
            "check_out": str(check_out),
            "guests_count": 2,
        }
        payload.update(extra)
        return payload

    def _create(self, check_in: date, check_out: date, user=None):
        self.client.force_authenticate(user or self.guest)
        response = self.client.post(self.list_url, self._payload(check_in, check_out), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def _action(self, reservation_id, name: str, user, data=None):
        self.client.force_authenticate(user)
        return self.client.post(reverse(f"reservation-{name}", args=[reservation_id]), data or {}, format="json")

    def test_guest_can_create_reservation(self) -> None:
        check_in = date.today() + timedelta(days=10)

        response = self.client.post(
            self.list_url,
            self._payload(check_in, check_in + timedelta(days=3), message="Arriving late"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(response.data["price"]["total"], "320.00")
        self.assertEqual(response.data["host_id"], self.host.id)
        self.assertIsNone(response.data["check_in_instructions"])
        reservation = Reservation.objects.get()
        self.assertEqual(reservation.guest, self.guest)
        self.assertEqual(reservation.message, "Arriving late")

    def test_overlap_returns_conflict(self) -> None:
        check_in = date.today() + timedelta(days=10)
        self._create(check_in, check_in + timedelta(days=3))

        self.client.force_authenticate(self.other_guest)
        response = self.client.post(
            self.list_url,
            self._payload(check_in + timedelta(days=2), check_in + timedelta(days=5)),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "date_conflict")
        self.assertEqual(len(response.data["conflicts"]), 1)
        self.assertEqual(Reservation.objects.count(), 1)

    def test_back_to_back_reservations_are_allowed(self) -> None:
        check_in = date.today() + timedelta(days=10)
        self._create(check_in, check_in + timedelta(days=2))

        self._create(check_in + timedelta(days=2), check_in + timedelta(days=4), user=self.other_guest)

        self.assertEqual(Reservation.objects.count(), 2)

    def test_manual_block_prevents_reservation(self) -> None:
        blocked = date.today() + timedelta(days=20)
        ledger.block_dates(self.property.id, [blocked], reason="Repairs")

        response = self.client.post(self.list_url, self._payload(blocked, blocked + timedelta(days=2)), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["conflicts"][0]["source"], "manual")

    def test_validation_errors_use_domain_codes(self) -> None:
        check_in = date.today() + timedelta(days=10)

        short = self.client.post(self.list_url, self._payload(check_in, check_in + timedelta(days=1)), format="json")
        crowded = self.client.post(
            self.list_url,
            self._payload(check_in, check_in + timedelta(days=3), guests_count=9),
            format="json",
        )

        self.assertEqual(short.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(short.data["code"], "invalid_range")
        self.assertEqual(crowded.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(crowded.data["code"], "capacity_exceeded")

    def test_anonymous_cannot_create(self) -> None:
        self.client.force_authenticate(None)
        check_in = date.today() + timedelta(days=10)

        response = self.client.post(self.list_url, self._payload(check_in, check_in + timedelta(days=3)), format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_host_accepts_and_guest_sees_instructions(self) -> None:
        check_in = date.today() + timedelta(days=10)
        created = self._create(check_in, check_in + timedelta(days=3))

        accepted = self._action(created["id"], "accept", self.host, {"check_in_instructions": "Gate code 1234"})
        self.assertEqual(accepted.status_code, status.HTTP_200_OK, accepted.data)
        self.assertEqual(accepted.data["status"], "confirmed")

        self.client.force_authenticate(self.guest)
        detail = self.client.get(reverse("reservation-detail", args=[created["id"]]))
        self.assertEqual(detail.data["check_in_instructions"], "Gate code 1234")
        self.assertEqual([entry["action"] for entry in detail.data["status_history"]], ["create", "accept"])

    def test_guest_cannot_accept(self) -> None:
        check_in = date.today() + timedelta(days=10)
        created = self._create(check_in, check_in + timedelta(days=3))

        response = self._action(created["id"], "accept", self.guest)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "forbidden")

    def test_decline_without_reason_is_rejected(self) -> None:
        check_in = date.today() + timedelta(days=10)
        created = self._create(check_in, check_in + timedelta(days=3))

        missing = self._action(created["id"], "decline", self.host)
        declined = self._action(created["id"], "decline", self.host, {"reason": "Maintenance week"})

        self.assertEqual(missing.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(missing.data["code"], "invalid_request")
        self.assertEqual(declined.status_code, status.HTTP_200_OK, declined.data)
        self.assertEqual(declined.data["cancellation_reason"], "Maintenance week")

    def test_guest_can_cancel_confirmed_reservation(self) -> None:
        check_in = date.today() + timedelta(days=3)
        created = self._create(check_in, check_in + timedelta(days=2))
        self._action(created["id"], "accept", self.host)

        response = self._action(created["id"], "cancel", self.guest, {"message": "Plans changed"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "cancelled")
        self.assertEqual(response.data["cancelled_by"], "guest")
        self.assertEqual(response.data["cancellation_message"], "Plans changed")
        self.assertTrue(ledger.is_free(self.property.id, Reservation.objects.get().dates))

    def test_stale_expected_status_returns_conflict(self) -> None:
        check_in = date.today() + timedelta(days=10)
        created = self._create(check_in, check_in + timedelta(days=3))
        self._action(created["id"], "withdraw", self.guest)

        response = self._action(created["id"], "accept", self.host, {"expected_status": "pending"})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "stale_transition")
        self.assertEqual(response.data["current_status"], "cancelled")

    def test_outsider_gets_not_found(self) -> None:
        check_in = date.today() + timedelta(days=10)
        created = self._create(check_in, check_in + timedelta(days=3))

        self.client.force_authenticate(self.other_guest)
        response = self.client.get(reverse("reservation-detail", args=[created["id"]]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_malformed_reservation_id_is_not_found(self) -> None:
        detail = self.client.get(reverse("reservation-detail", args=["not-a-uuid"]))
        self.assertEqual(detail.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(detail.data["code"], "not_found")

        actions = [("accept", self.host), ("decline", self.host), ("withdraw", self.guest), ("cancel", self.guest)]
        for name, user in actions:
            response = self._action("not-a-uuid", name, user, {"reason": "Closed"})
            self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, name)
            self.assertEqual(response.data["code"], "not_found", name)

    def test_accept_after_check_in_arrived_is_forbidden(self) -> None:
        today = date.today()
        created = self._create(today + timedelta(days=10), today + timedelta(days=13))
        Reservation.objects.filter(pk=created["id"]).update(check_in=today, check_out=today + timedelta(days=3))

        response = self._action(created["id"], "accept", self.host)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "forbidden")
        self.assertEqual(Reservation.objects.get().status, Reservation.Status.PENDING)

    def test_list_filters_by_role_and_derived_status(self) -> None:
        today = date.today()
        past = self._create(today + timedelta(days=30), today + timedelta(days=33))
        self._action(past["id"], "accept", self.host)
        Reservation.objects.filter(pk=past["id"]).update(
            check_in=today - timedelta(days=8), check_out=today - timedelta(days=5)
        )
        self._create(today + timedelta(days=10), today + timedelta(days=13))

        self.client.force_authenticate(self.host)
        hosting = self.client.get(self.list_url, {"role": "host"})
        completed = self.client.get(self.list_url, {"status": "completed"})

        self.client.force_authenticate(self.guest)
        as_host = self.client.get(self.list_url, {"role": "host"})

        self.assertEqual(hosting.data["count"], 2)
        self.assertEqual([item["id"] for item in completed.data["results"]], [past["id"]])
        self.assertEqual(completed.data["results"][0]["status"], "completed")
        self.assertEqual(as_host.data["count"], 0)

    @override_settings(RESERVATION_LIST_MAX_LIMIT=1)
    def test_page_size_is_capped(self) -> None:
        today = date.today()
        self._create(today + timedelta(days=10), today + timedelta(days=12))
        self._create(today + timedelta(days=20), today + timedelta(days=22))

        response = self.client.get(self.list_url, {"limit": 100})

        self.assertEqual(response.data["count"], 2)
        self.assertEqual(len(response.data["results"]), 1)
