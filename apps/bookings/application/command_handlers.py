"""
Reservation Command Handlers

These are the use cases of the booking lifecycle manager.
They orchestrate the availability ledger, the price calculator and the
reservation state machine inside a unit of work.

Commands:
- CreateReservationCommand: A guest requests a stay
- AcceptReservationCommand: The host accepts a pending request
- DeclineReservationCommand: The host declines a pending request
- WithdrawReservationCommand: The guest withdraws a pending request
- CancelReservationCommand: Either party cancels a confirmed stay
- ExpireReservationCommand: The system expires an unanswered request
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID, uuid4
import logging

from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.bookings.domain import pricing
from apps.bookings.domain.events import (
    ReservationAccepted,
    ReservationCancelled,
    ReservationCreated,
    ReservationDeclined,
)
from apps.bookings.domain.state_machine import (
    Action,
    LedgerEffect,
    Party,
    ReservationStatus,
    Transition,
    resolve_transition,
)
from apps.bookings.models import Reservation, ReservationStatusChange
from apps.properties import services as ledger
from apps.properties.domain.terms import PropertyTerms
from apps.properties.models import Property
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import (
    CapacityExceeded,
    Forbidden,
    InvalidRange,
    InvalidRequest,
    NotFound,
    StaleTransition,
)
from shared.domain.value_objects import DateRange

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    """
    Command to request a stay

    This is the primary entry point for creating reservations.
    """
    property_id: int
    guest_id: int
    check_in: date
    check_out: date
    guests_count: int
    message: str = ''


@dataclass
class AcceptReservationCommand:
    reservation_id: UUID
    acting_user_id: int
    check_in_instructions: str = ''
    expected_status: str | None = None


@dataclass
class DeclineReservationCommand:
    reservation_id: UUID
    acting_user_id: int
    reason: str
    expected_status: str | None = None


@dataclass
class WithdrawReservationCommand:
    reservation_id: UUID
    acting_user_id: int
    expected_status: str | None = None


@dataclass
class CancelReservationCommand:
    reservation_id: UUID
    acting_user_id: int
    message: str = ''
    expected_status: str | None = None


@dataclass
class ExpireReservationCommand:
    reservation_id: UUID
    reason: str = 'The host did not respond in time.'
    expected_status: str | None = None


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation command

    Strategy:
    1. Read the property terms once
    2. Validate range, minimum stay and capacity before touching the ledger
    3. Compute the price snapshot
    4. Start the unit of work (atomic)
    5. Hold the dates in the ledger (property-scoped lock, all-or-nothing)
    6. Persist the pending reservation with its ledger token
    7. Commit, then publish ReservationCreated
    """

    def handle(self, command: CreateReservationCommand) -> Reservation:
        logger.info(
            f"Creating reservation for property {command.property_id}, "
            f"guest {command.guest_id}, dates {command.check_in} - {command.check_out}"
        )

        terms = self._load_terms(command.property_id)

        if terms.host_id == command.guest_id:
            raise Forbidden("Hosts cannot book their own property.")

        dates = self._validate_range(command.check_in, command.check_out, terms.minimum_nights)

        if command.guests_count < 1 or command.guests_count > terms.capacity:
            raise CapacityExceeded(
                f"Guest count ({command.guests_count}) must be between 1 and "
                f"the property capacity ({terms.capacity})."
            )

        price = pricing.compute(
            terms.nightly_rate,
            terms.cleaning_fee,
            command.check_in,
            command.check_out,
            currency=terms.currency,
        )

        reservation_id = uuid4()
        with DjangoUnitOfWork() as uow:
            hold = ledger.try_hold(terms.property_id, dates, reservation_id=reservation_id)

            reservation = Reservation(
                id=reservation_id,
                property_id=terms.property_id,
                guest_id=command.guest_id,
                host_id=terms.host_id,
                check_in=command.check_in,
                check_out=command.check_out,
                guests_count=command.guests_count,
                message=command.message or '',
                nightly_rate=price.nightly_rate,
                nights=price.nights,
                nightly_total=price.nightly_total,
                cleaning_fee=price.cleaning_fee,
                total_price=price.total,
                currency=price.currency,
                status=Reservation.Status.PENDING,
                hold_token=hold.token,
            )
            reservation.save(force_insert=True)

            ReservationStatusChange.objects.create(
                reservation=reservation,
                from_status='',
                to_status=Reservation.Status.PENDING,
                action='create',
                actor_id=command.guest_id,
            )

            reservation.add_event(ReservationCreated(
                aggregate_id=reservation.id,
                reservation_id=reservation.id,
                reservation_code=reservation.reservation_code,
                property_id=terms.property_id,
                guest_id=command.guest_id,
                host_id=terms.host_id,
                dates=dates,
                guests_count=command.guests_count,
                total_price=price.total,
                currency=price.currency,
            ))
            uow.collect_events(reservation)

        logger.info(
            f"Reservation created: {reservation.reservation_code} "
            f"(ID: {reservation.id}, total {price.total} {price.currency})"
        )
        return reservation

    def _load_terms(self, property_id: int) -> PropertyTerms:
        try:
            terms = Property.objects.get(pk=property_id).terms()
        except Property.DoesNotExist:
            raise NotFound(f"Property {property_id} not found.")
        if not terms.is_bookable:
            raise NotFound(f"Property {property_id} is not available for booking.")
        return terms

    def _validate_range(self, check_in: date, check_out: date, minimum_nights: int) -> DateRange:
        if check_out <= check_in:
            raise InvalidRange("Check-out must be after check-in.")
        dates = DateRange(check_in, check_out)
        if len(dates) < minimum_nights:
            raise InvalidRange(f"A minimum of {minimum_nights} nights is required.")
        return dates


class ReservationTransitionHandler:
    """
    Base handler for transitions of an existing reservation

    The stored status observed at load time is the precondition of the
    final write (compare-and-set). Losing a race against another
    transition raises StaleTransition and rolls back the ledger change.
    """

    action: Action

    def handle(self, command) -> Reservation:
        logger.info(f"{self.action.value.capitalize()} requested for reservation {command.reservation_id}")

        with DjangoUnitOfWork() as uow:
            reservation = self._load(command.reservation_id)
            observed = ReservationStatus(reservation.status)
            current = reservation.effective_status()

            if command.expected_status and self._expected(command.expected_status) != current:
                raise StaleTransition(
                    f"Reservation {reservation.reservation_code} is {current.value}, "
                    f"not {command.expected_status}.",
                    current_status=current.value,
                )

            party = self._party(reservation, command)
            transition = resolve_transition(current, self.action, party)
            self.validate(reservation, command)

            now = timezone.now()
            changes = self.changes(reservation, command, party, now)
            persist_transition(reservation, observed, transition.target, changes, now)

            if transition.ledger == LedgerEffect.COMMIT:
                ledger.commit(reservation.hold_token)
            else:
                ledger.release(reservation.hold_token)

            ReservationStatusChange.objects.create(
                reservation=reservation,
                from_status=observed.value,
                to_status=transition.target.value,
                action=self.action.value,
                actor_id=getattr(command, 'acting_user_id', None),
                note=self.note(command),
            )

            reservation.add_event(self.event(reservation, command, party, transition))
            uow.collect_events(reservation)

        logger.info(
            f"Reservation {reservation.reservation_code} {observed.value} -> "
            f"{transition.target.value} ({self.action.value} by {party.value})"
        )
        return reservation

    def _load(self, reservation_id: UUID) -> Reservation:
        try:
            return Reservation.objects.get(pk=reservation_id)
        except (Reservation.DoesNotExist, ValueError, ValidationError):
            raise NotFound(f"Reservation {reservation_id} not found.")

    def _expected(self, value) -> ReservationStatus:
        try:
            return ReservationStatus(value)
        except ValueError:
            raise InvalidRequest(f"Unknown reservation status: {value!r}.")

    def _party(self, reservation: Reservation, command) -> Party | None:
        return reservation.party_of(command.acting_user_id)

    def validate(self, reservation: Reservation, command) -> None:
        pass

    def changes(self, reservation: Reservation, command, party: Party, now) -> dict:
        return {}

    def note(self, command) -> str:
        return ''

    def event(self, reservation: Reservation, command, party: Party, transition: Transition):
        raise NotImplementedError

    def _event_fields(self, reservation: Reservation) -> dict:
        return {
            'aggregate_id': reservation.id,
            'reservation_id': reservation.id,
            'reservation_code': reservation.reservation_code,
            'property_id': reservation.property_id,
            'guest_id': reservation.guest_id,
            'host_id': reservation.host_id,
            'dates': reservation.dates,
        }

    def _cancellation(self, party: Party, now, **extra) -> dict:
        return {'cancelled_by': party.value, 'cancelled_at': now, **extra}


def persist_transition(
    reservation: Reservation,
    observed: ReservationStatus,
    target: ReservationStatus,
    changes: dict,
    now=None,
) -> None:
    """
    Write ``target`` only if the stored status is still ``observed``.

    Raises StaleTransition when another transition committed first.
    """
    now = now or timezone.now()
    updated = Reservation.objects.filter(pk=reservation.pk, status=observed.value).update(
        status=target.value,
        updated_at=now,
        **changes,
    )
    if not updated:
        raise StaleTransition(
            f"Reservation {reservation.reservation_code} changed while it was being updated; "
            "reload it and try again."
        )

    reservation.status = target.value
    reservation.updated_at = now
    for field_name, value in changes.items():
        setattr(reservation, field_name, value)


class AcceptReservationHandler(ReservationTransitionHandler):
    action = Action.ACCEPT

    def validate(self, reservation, command):
        if reservation.check_in <= timezone.localdate():
            raise Forbidden(
                f"Reservation {reservation.reservation_code} can no longer be accepted; "
                "its check-in date has arrived."
            )

    def changes(self, reservation, command, party, now):
        changes = {'confirmed_at': now}
        if command.check_in_instructions:
            changes['check_in_instructions'] = command.check_in_instructions
        return changes

    def event(self, reservation, command, party, transition):
        return ReservationAccepted(**self._event_fields(reservation))


class DeclineReservationHandler(ReservationTransitionHandler):
    action = Action.DECLINE

    def validate(self, reservation, command):
        if not (command.reason or '').strip():
            raise InvalidRequest("A reason is required to decline a reservation.")

    def changes(self, reservation, command, party, now):
        return self._cancellation(party, now, cancellation_reason=command.reason.strip())

    def note(self, command):
        return command.reason.strip()

    def event(self, reservation, command, party, transition):
        return ReservationDeclined(reason=reservation.cancellation_reason, **self._event_fields(reservation))


class WithdrawReservationHandler(ReservationTransitionHandler):
    action = Action.WITHDRAW

    def changes(self, reservation, command, party, now):
        return self._cancellation(party, now)

    def event(self, reservation, command, party, transition):
        return ReservationCancelled(
            cancelled_by=party.value,
            previous_status=transition.source.value,
            **self._event_fields(reservation),
        )


class CancelReservationHandler(ReservationTransitionHandler):
    action = Action.CANCEL

    def changes(self, reservation, command, party, now):
        return self._cancellation(party, now, cancellation_message=command.message or '')

    def note(self, command):
        return command.message or ''

    def event(self, reservation, command, party, transition):
        return ReservationCancelled(
            cancelled_by=party.value,
            previous_status=transition.source.value,
            message=reservation.cancellation_message,
            **self._event_fields(reservation),
        )


class ExpireReservationHandler(ReservationTransitionHandler):
    action = Action.EXPIRE

    def _party(self, reservation, command):
        return Party.SYSTEM

    def changes(self, reservation, command, party, now):
        return self._cancellation(party, now, cancellation_reason=command.reason)

    def note(self, command):
        return command.reason

    def event(self, reservation, command, party, transition):
        return ReservationCancelled(
            cancelled_by=party.value,
            previous_status=transition.source.value,
            message=command.reason,
            **self._event_fields(reservation),
        )
