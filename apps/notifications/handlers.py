"""Event handlers turning reservation events into inbox entries.

Handlers run after the reservation transaction has committed. A failing
handler is logged by the message bus and never undoes the reservation
change.
"""

from __future__ import annotations

import logging

from apps.bookings.domain.events import (
    ReservationAccepted,
    ReservationCancelled,
    ReservationCreated,
    ReservationDeclined,
    ReservationEvent,
)
from shared.application.message_bus import MessageBus, message_bus

from .models import Notification

logger = logging.getLogger(__name__)


def _stay(event: ReservationEvent) -> str:
    return f"{event.dates.start_date:%Y-%m-%d} to {event.dates.end_date:%Y-%m-%d}"


def _notify(event: ReservationEvent, title: str, message: str) -> list[Notification]:
    payload = event.to_dict()
    notifications = [
        Notification.objects.create(
            user_id=recipient_id,
            event=event.name,
            reservation_id=event.reservation_id,
            title=title,
            message=message,
            payload=payload,
        )
        for recipient_id in event.recipients()
    ]
    logger.info(
        f"[NOTIFICATION] {event.name} for reservation {event.reservation_code} "
        f"stored for {len(notifications)} recipient(s)"
    )
    return notifications


def on_reservation_created(event: ReservationCreated) -> None:
    _notify(
        event,
        f"New reservation request #{event.reservation_code}",
        f"A guest requested your property for {_stay(event)} "
        f"({event.guests_count} guest(s), {event.total_price} {event.currency}).",
    )


def on_reservation_accepted(event: ReservationAccepted) -> None:
    _notify(
        event,
        f"Reservation #{event.reservation_code} confirmed",
        f"Your stay from {_stay(event)} has been accepted by the host.",
    )


def on_reservation_declined(event: ReservationDeclined) -> None:
    _notify(
        event,
        f"Reservation #{event.reservation_code} declined",
        f"The host declined your request for {_stay(event)}: {event.reason}",
    )


def on_reservation_cancelled(event: ReservationCancelled) -> None:
    if event.cancelled_by == 'system':
        message = f"The request for {_stay(event)} expired without an answer."
    elif event.previous_status == 'pending':
        message = f"The guest withdrew the request for {_stay(event)}."
    else:
        message = f"The stay from {_stay(event)} was cancelled by the {event.cancelled_by}."
    if event.message and event.cancelled_by != 'system':
        message = f"{message} Message: {event.message}"
    _notify(event, f"Reservation #{event.reservation_code} cancelled", message)


EVENT_HANDLERS = {
    ReservationCreated: on_reservation_created,
    ReservationAccepted: on_reservation_accepted,
    ReservationDeclined: on_reservation_declined,
    ReservationCancelled: on_reservation_cancelled,
}


def register_handlers(bus: MessageBus = message_bus) -> None:
    for event_type, handler in EVENT_HANDLERS.items():
        bus.register_event_handler(event_type, handler)
