"""Property domain models.

The property record is owned by listing management; the booking core only
reads its commercial terms. ``AvailabilityHold`` rows are the storage of
the availability ledger: one row per contiguous range of nights that is
held or booked, free nights have no row.
"""

from __future__ import annotations

import builtins
import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange

from .domain.inventory import Allocation, AllocationSource, DayStatus
from .domain.terms import PropertyTerms


def default_currency() -> str:
    return settings.BOOKING_CURRENCY


class Property(models.Model):
    """A villa offered for short-term rental."""

    class Status(models.TextChoices):
        DRAFT = "draft", _("Draft")
        LISTED = "listed", _("Listed")
        UNLISTED = "unlisted", _("Unlisted")

    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    nightly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    cleaning_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    minimum_nights = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    capacity = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    currency = models.CharField(max_length=3, default=default_currency)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["host", "status"], name="property_host_status_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def is_bookable(self) -> bool:
        return self.status == self.Status.LISTED

    def terms(self) -> PropertyTerms:
        return PropertyTerms(
            property_id=self.pk,
            host_id=self.host_id,
            nightly_rate=self.nightly_rate,
            cleaning_fee=self.cleaning_fee,
            minimum_nights=self.minimum_nights,
            capacity=self.capacity,
            currency=self.currency,
            is_bookable=self.is_bookable,
        )


class AvailabilityHold(models.Model):
    """A held or booked range of nights on a property calendar."""

    class HoldStatus(models.TextChoices):
        HELD = DayStatus.HELD.value, _("Held")
        BOOKED = DayStatus.BOOKED.value, _("Booked")

    class Source(models.TextChoices):
        RESERVATION = AllocationSource.RESERVATION.value, _("Reservation")
        MANUAL = AllocationSource.MANUAL.value, _("Manual block")

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="availability_holds",
    )
    token = models.UUIDField(default=uuid.uuid4, db_index=True, editable=False)
    start_date = models.DateField()
    end_date = models.DateField(help_text=_("Exclusive: the first night that is not covered."))
    status = models.CharField(max_length=10, choices=HoldStatus.choices, default=HoldStatus.HELD)
    source = models.CharField(max_length=20, choices=Source.choices, default=Source.RESERVATION)
    reservation_id = models.UUIDField(null=True, blank=True, db_index=True)
    reason = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_availability_holds",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Availability hold")
        verbose_name_plural = _("Availability holds")
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="availability_hold_valid_range",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "start_date", "end_date"], name="hold_property_range_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.property_id}: {self.start_date} - {self.end_date} ({self.status})"

    @builtins.property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    def to_allocation(self) -> Allocation:
        return Allocation(
            token=self.token,
            dates=self.dates,
            status=DayStatus(self.status),
            source=AllocationSource(self.source),
            reservation_id=self.reservation_id,
        )
