"""Tests for the property calendar, host blocking and quote API."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings import services as booking_services
from apps.properties.models import AvailabilityHold, Property

User = get_user_model()


class PropertyCalendarAPITests(APITestCase):
    def setUp(self) -> None:
        self.host = User.objects.create_user(username="host-calendar", password="StrongPass123")
        self.guest = User.objects.create_user(username="guest-calendar", password="StrongPass123")
        self.property = Property.objects.create(
            host=self.host,
            title="Hillside villa",
            status=Property.Status.LISTED,
            nightly_rate=Decimal("150.00"),
            cleaning_fee=Decimal("45.00"),
            minimum_nights=1,
            capacity=6,
        )
        self.start = date.today() + timedelta(days=30)
        self.client.force_authenticate(self.host)

    def _url(self, name: str, property_id=None) -> str:
        return reverse(name, kwargs={"property_id": property_id or self.property.id})

    def _day(self, offset: int) -> date:
        return self.start + timedelta(days=offset)

    def test_calendar_is_public_and_inclusive(self) -> None:
        reservation = booking_services.create_reservation(
            self.property.id, self.guest.id, self._day(1), self._day(3), 2
        )
        booking_services.accept_reservation(reservation.id, self.host.id)
        self.client.force_authenticate(None)

        response = self.client.get(
            self._url("property-calendar"),
            {"date_from": str(self._day(0)), "date_to": str(self._day(3))},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(
            [(day["status"], day["source"]) for day in response.data["dates"]],
            [("free", None), ("booked", "reservation"), ("booked", "reservation"), ("free", None)],
        )

    def test_calendar_rejects_inverted_window(self) -> None:
        response = self.client.get(
            self._url("property-calendar"),
            {"date_from": str(self._day(3)), "date_to": str(self._day(0))},
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_calendar_of_unknown_property_is_not_found(self) -> None:
        response = self.client.get(self._url("property-calendar", property_id=999999))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "not_found")

    def test_host_can_block_and_unblock_dates(self) -> None:
        dates = [str(self._day(offset)) for offset in range(4)]

        blocked = self.client.post(
            self._url("property-calendar-block"), {"dates": dates, "reason": "Family visit"}, format="json"
        )
        self.assertEqual(blocked.status_code, status.HTTP_201_CREATED, blocked.data)
        self.assertEqual(len(blocked.data["blocks"]), 1)
        self.assertEqual(blocked.data["blocks"][0]["source"], "manual")

        unblocked = self.client.post(
            self._url("property-calendar-unblock"), {"dates": [str(self._day(1))]}, format="json"
        )
        self.assertEqual(unblocked.status_code, status.HTTP_200_OK, unblocked.data)
        self.assertEqual(unblocked.data["freed"], 1)
        self.assertEqual(AvailabilityHold.objects.filter(property=self.property).count(), 2)

    def test_blocking_reserved_dates_conflicts(self) -> None:
        booking_services.create_reservation(self.property.id, self.guest.id, self._day(1), self._day(3), 2)

        response = self.client.post(
            self._url("property-calendar-block"),
            {"dates": [str(self._day(0)), str(self._day(2))]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertFalse(AvailabilityHold.objects.filter(source=AvailabilityHold.Source.MANUAL).exists())

    def test_only_the_host_can_block(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(
            self._url("property-calendar-block"), {"dates": [str(self._day(0))]}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(AvailabilityHold.objects.exists())

    def test_quote_returns_breakdown_without_holding(self) -> None:
        self.client.force_authenticate(None)

        response = self.client.get(
            self._url("property-quote"),
            {"check_in": str(self._day(0)), "check_out": str(self._day(2))},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["nights"], 2)
        self.assertEqual(response.data["total"], "345.00")
        self.assertFalse(AvailabilityHold.objects.exists())

    def test_quote_rejects_empty_stay(self) -> None:
        response = self.client.get(
            self._url("property-quote"),
            {"check_in": str(self._day(2)), "check_out": str(self._day(2))},
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_range")
