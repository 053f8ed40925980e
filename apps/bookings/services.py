"""Lifecycle entry points for the booking domain.

Views, tasks and tests call these functions. Each one builds a command and
dispatches it through the message bus, so the acting user is always an
explicit argument and nothing is read from request context.
"""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError  # type: ignore
from django.db.models import QuerySet  # type: ignore

from apps.properties.models import Property
from shared.application.message_bus import message_bus
from shared.domain.errors import NotFound

from .application.command_handlers import (
    AcceptReservationCommand,
    CancelReservationCommand,
    CreateReservationCommand,
    DeclineReservationCommand,
    ExpireReservationCommand,
    WithdrawReservationCommand,
)
from .domain import pricing
from .models import Reservation


def create_reservation(
    property_id: int,
    guest_id: int,
    check_in: date,
    check_out: date,
    guests_count: int,
    message: str = "",
) -> Reservation:
    return message_bus.handle_command(
        CreateReservationCommand(
            property_id=property_id,
            guest_id=guest_id,
            check_in=check_in,
            check_out=check_out,
            guests_count=guests_count,
            message=message,
        )
    )


def accept_reservation(
    reservation_id: UUID,
    acting_user_id: int,
    *,
    check_in_instructions: str = "",
    expected_status: Optional[str] = None,
) -> Reservation:
    return message_bus.handle_command(
        AcceptReservationCommand(
            reservation_id=reservation_id,
            acting_user_id=acting_user_id,
            check_in_instructions=check_in_instructions,
            expected_status=expected_status,
        )
    )


def decline_reservation(
    reservation_id: UUID,
    acting_user_id: int,
    reason: str,
    *,
    expected_status: Optional[str] = None,
) -> Reservation:
    return message_bus.handle_command(
        DeclineReservationCommand(
            reservation_id=reservation_id,
            acting_user_id=acting_user_id,
            reason=reason,
            expected_status=expected_status,
        )
    )


def withdraw_reservation(
    reservation_id: UUID,
    acting_user_id: int,
    *,
    expected_status: Optional[str] = None,
) -> Reservation:
    return message_bus.handle_command(
        WithdrawReservationCommand(
            reservation_id=reservation_id,
            acting_user_id=acting_user_id,
            expected_status=expected_status,
        )
    )


def cancel_reservation(
    reservation_id: UUID,
    acting_user_id: int,
    message: str = "",
    *,
    expected_status: Optional[str] = None,
) -> Reservation:
    return message_bus.handle_command(
        CancelReservationCommand(
            reservation_id=reservation_id,
            acting_user_id=acting_user_id,
            message=message,
            expected_status=expected_status,
        )
    )


def expire_reservation(reservation_id: UUID, reason: Optional[str] = None) -> Reservation:
    command = ExpireReservationCommand(reservation_id=reservation_id)
    if reason:
        command.reason = reason
    return message_bus.handle_command(command)


def reservations_for(user_id: int) -> QuerySet:
    """Reservations where the user is the guest or the host."""

    return Reservation.objects.for_party(user_id).select_related("property")


def get_reservation(reservation_id: UUID, user_id: int) -> Reservation:
    """Return the reservation if the user is one of its parties.

    Anyone else gets ``NotFound`` so that reservation ids do not leak.
    """

    try:
        return reservations_for(user_id).get(pk=reservation_id)
    except (Reservation.DoesNotExist, ValueError, ValidationError):
        raise NotFound(f"Reservation {reservation_id} not found.")


def quote(property_id: int, check_in: date, check_out: date) -> pricing.PriceBreakdown:
    """Price a stay with the current terms without holding any dates."""

    try:
        terms = Property.objects.get(pk=property_id).terms()
    except Property.DoesNotExist:
        raise NotFound(f"Property {property_id} not found.")
    return pricing.compute(
        terms.nightly_rate,
        terms.cleaning_fee,
        check_in,
        check_out,
        currency=terms.currency,
    )
