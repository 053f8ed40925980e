"""Reservation models.

A reservation is created by a guest, moved through its lifecycle only by
the lifecycle command handlers, and never deleted. The price snapshot
taken at creation time is stored field by field and never recomputed.
"""

from __future__ import annotations

import builtins
import secrets
import uuid
from datetime import date

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder
from shared.domain.value_objects import DateRange
from shared.infrastructure.fields import EncryptedTextField

from .domain.pricing import PriceBreakdown
from .domain.state_machine import Party, ReservationStatus, effective_status


class ReservationQuerySet(models.QuerySet):

    def for_party(self, user_id: int) -> "ReservationQuerySet":
        return self.filter(models.Q(guest_id=user_id) | models.Q(host_id=user_id))

    def blocking(self) -> "ReservationQuerySet":
        return self.filter(status__in=[Reservation.Status.PENDING, Reservation.Status.CONFIRMED])

    def with_effective_status(self, status: str, today: date | None = None) -> "ReservationQuerySet":
        today = today or timezone.localdate()
        status = ReservationStatus(status)
        if status == ReservationStatus.COMPLETED:
            return self.filter(status=Reservation.Status.CONFIRMED, check_out__lt=today)
        if status == ReservationStatus.CONFIRMED:
            return self.filter(status=Reservation.Status.CONFIRMED, check_out__gte=today)
        return self.filter(status=status.value)


class Reservation(EventRecorder, models.Model):
    """A guest's request to stay at a property over a date range."""

    class Status(models.TextChoices):
        PENDING = ReservationStatus.PENDING.value, _("Pending")
        CONFIRMED = ReservationStatus.CONFIRMED.value, _("Confirmed")
        CANCELLED = ReservationStatus.CANCELLED.value, _("Cancelled")

    class CancelledBy(models.TextChoices):
        GUEST = Party.GUEST.value, _("Guest")
        HOST = Party.HOST.value, _("Host")
        SYSTEM = Party.SYSTEM.value, _("System")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reservation_code = models.CharField(max_length=12, unique=True, editable=False)
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    guest = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="hosted_reservations",
    )
    check_in = models.DateField()
    check_out = models.DateField()
    guests_count = models.PositiveSmallIntegerField(default=1)
    message = models.TextField(blank=True)

    # Price snapshot, fixed at creation
    nightly_rate = models.DecimalField(max_digits=10, decimal_places=2)
    nights = models.PositiveSmallIntegerField()
    nightly_total = models.DecimalField(max_digits=12, decimal_places=2)
    cleaning_fee = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3)

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    hold_token = models.UUIDField(help_text=_("Availability ledger token owning the stay's nights."))
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.CharField(max_length=10, choices=CancelledBy.choices, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancellation_message = models.TextField(blank=True)
    check_in_instructions = EncryptedTextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReservationQuerySet.as_manager()

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="reservation_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(guests_count__gte=1),
                name="reservation_has_guests",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "check_in", "check_out"], name="reservation_property_dates_idx"),
            models.Index(fields=["status"], name="reservation_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation #{self.reservation_code} for property {self.property_id}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self.reservation_code:
            self.reservation_code = self.generate_reservation_code()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_reservation_code() -> str:
        return secrets.token_hex(4).upper()

    @builtins.property
    def dates(self) -> DateRange:
        return DateRange(self.check_in, self.check_out)

    @builtins.property
    def price_breakdown(self) -> PriceBreakdown:
        return PriceBreakdown(
            nights=self.nights,
            nightly_rate=self.nightly_rate,
            nightly_total=self.nightly_total,
            cleaning_fee=self.cleaning_fee,
            total=self.total_price,
            currency=self.currency,
        )

    def effective_status(self, today: date | None = None) -> ReservationStatus:
        return effective_status(ReservationStatus(self.status), self.check_out, today or timezone.localdate())

    def is_completed(self, today: date | None = None) -> bool:
        return self.effective_status(today) == ReservationStatus.COMPLETED

    def party_of(self, user_id: int | None) -> Party | None:
        if user_id is None:
            return None
        if user_id == self.host_id:
            return Party.HOST
        if user_id == self.guest_id:
            return Party.GUEST
        return None

    def counterpart_of(self, user_id: int) -> int | None:
        party = self.party_of(user_id)
        if party == Party.GUEST:
            return self.host_id
        if party == Party.HOST:
            return self.guest_id
        return None


class ReservationStatusChange(models.Model):
    """Append-only audit trail of reservation transitions."""

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    from_status = models.CharField(max_length=16, blank=True)
    to_status = models.CharField(max_length=16)
    action = models.CharField(max_length=16)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    note = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.reservation_id}: {self.from_status or '-'} -> {self.to_status} ({self.action})"
