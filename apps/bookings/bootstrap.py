"""Wire the lifecycle command handlers into the message bus."""

from shared.application.message_bus import MessageBus, message_bus

from .application.command_handlers import (
    AcceptReservationCommand,
    AcceptReservationHandler,
    CancelReservationCommand,
    CancelReservationHandler,
    CreateReservationCommand,
    CreateReservationHandler,
    DeclineReservationCommand,
    DeclineReservationHandler,
    ExpireReservationCommand,
    ExpireReservationHandler,
    WithdrawReservationCommand,
    WithdrawReservationHandler,
)

COMMAND_HANDLERS = {
    CreateReservationCommand: CreateReservationHandler,
    AcceptReservationCommand: AcceptReservationHandler,
    DeclineReservationCommand: DeclineReservationHandler,
    WithdrawReservationCommand: WithdrawReservationHandler,
    CancelReservationCommand: CancelReservationHandler,
    ExpireReservationCommand: ExpireReservationHandler,
}


def register_handlers(bus: MessageBus = message_bus) -> None:
    # ready() may run more than once (e.g. under the test runner)
    for command_type, handler_class in COMMAND_HANDLERS.items():
        if not bus.has_command_handler(command_type):
            bus.register_command_handler(command_type, handler_class().handle)
