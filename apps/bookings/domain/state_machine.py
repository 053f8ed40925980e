"""
Reservation state machine

Closed set of statuses and the explicit table of permitted transitions.
Anything not listed in ``TRANSITIONS`` is rejected with ``Forbidden``.

    pending   --accept(host)-->          confirmed
    pending   --decline(host)-->         cancelled
    pending   --withdraw(guest)-->       cancelled
    pending   --expire(system)-->        cancelled
    confirmed --cancel(guest|host)-->    cancelled
    confirmed --(check-out passed)-->    completed   (derived on read)
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, FrozenSet, Tuple

from shared.domain.errors import Forbidden


class ReservationStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in (ReservationStatus.COMPLETED, ReservationStatus.CANCELLED)

    @property
    def blocks_dates(self) -> bool:
        return self in (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


# ``completed`` is never written; it is derived from ``confirmed`` and the clock.
STORED_STATUSES = (
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.CANCELLED,
)


class Action(str, Enum):
    ACCEPT = 'accept'
    DECLINE = 'decline'
    WITHDRAW = 'withdraw'
    CANCEL = 'cancel'
    EXPIRE = 'expire'


class Party(str, Enum):
    GUEST = 'guest'
    HOST = 'host'
    SYSTEM = 'system'


class LedgerEffect(str, Enum):
    COMMIT = 'commit'
    RELEASE = 'release'


@dataclass(frozen=True)
class Transition:
    source: ReservationStatus
    action: Action
    target: ReservationStatus
    allowed: FrozenSet[Party]
    ledger: LedgerEffect


def _transition(source, action, target, allowed, ledger) -> Tuple[Tuple[ReservationStatus, Action], Transition]:
    return (source, action), Transition(source, action, target, frozenset(allowed), ledger)


TRANSITIONS: Dict[Tuple[ReservationStatus, Action], Transition] = dict([
    _transition(ReservationStatus.PENDING, Action.ACCEPT, ReservationStatus.CONFIRMED,
                {Party.HOST}, LedgerEffect.COMMIT),
    _transition(ReservationStatus.PENDING, Action.DECLINE, ReservationStatus.CANCELLED,
                {Party.HOST}, LedgerEffect.RELEASE),
    _transition(ReservationStatus.PENDING, Action.WITHDRAW, ReservationStatus.CANCELLED,
                {Party.GUEST}, LedgerEffect.RELEASE),
    _transition(ReservationStatus.PENDING, Action.EXPIRE, ReservationStatus.CANCELLED,
                {Party.SYSTEM}, LedgerEffect.RELEASE),
    _transition(ReservationStatus.CONFIRMED, Action.CANCEL, ReservationStatus.CANCELLED,
                {Party.GUEST, Party.HOST}, LedgerEffect.RELEASE),
])


def effective_status(stored: ReservationStatus, check_out: date, today: date) -> ReservationStatus:
    """A confirmed stay whose check-out date is in the past reads as completed."""
    stored = ReservationStatus(stored)
    if stored == ReservationStatus.CONFIRMED and check_out < today:
        return ReservationStatus.COMPLETED
    return stored


def resolve_transition(current: ReservationStatus, action: Action, party: Party | None) -> Transition:
    """Look up the transition for ``action`` or raise ``Forbidden``."""
    current = ReservationStatus(current)
    action = Action(action)

    if party is None:
        raise Forbidden(f"Only the guest or the host of this reservation may {action.value} it.")

    transition = TRANSITIONS.get((current, action))
    if transition is None:
        raise Forbidden(f"Cannot {action.value} a {current.value} reservation.")

    if party not in transition.allowed:
        allowed = ' or '.join(sorted(p.value for p in transition.allowed))
        raise Forbidden(f"Only the {allowed} may {action.value} a {current.value} reservation.")

    return transition
