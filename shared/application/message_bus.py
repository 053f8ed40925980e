"""
Message Bus

Routes lifecycle commands to their single handler and domain events to
every subscriber. Events are routed by their logical ``name``
(``reservation_created``, ...) so consumers in other apps can subscribe
without importing the producing app's event classes.
"""

from typing import Any, Callable, Dict, List, Type, Union
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventKey = Union[str, Type[DomainEvent]]


def _event_name(event_type: EventKey) -> str:
    if isinstance(event_type, str):
        return event_type
    return event_type.name


class MessageBus:
    """
    Commands: exactly one handler per command class.
    Events: any number of subscribers per event name, called in
    registration order.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[DomainEvent], None]]] = {}
        self._command_handlers: Dict[Type, Callable[[Any], Any]] = {}

    def register_event_handler(self, event_type: EventKey, handler: Callable[[DomainEvent], None]):
        """Subscribe ``handler`` to an event class or logical event name.

        Subscribing the same handler twice is a no-op.
        """
        name = _event_name(event_type)
        subscribers = self._subscribers.setdefault(name, [])
        if handler not in subscribers:
            subscribers.append(handler)
            logger.debug(f"Subscribed {getattr(handler, '__name__', handler)} to {name}")

    def subscribers(self, event_type: EventKey) -> List[Callable[[DomainEvent], None]]:
        return list(self._subscribers.get(_event_name(event_type), []))

    def register_command_handler(self, command_type: Type, handler: Callable[[Any], Any]):
        if command_type in self._command_handlers:
            raise ValueError(f"{command_type.__name__} already has a handler.")
        self._command_handlers[command_type] = handler

    def has_command_handler(self, command_type: Type) -> bool:
        return command_type in self._command_handlers

    def handle_command(self, command: Any) -> Any:
        """
        Run the handler registered for ``type(command)``.

        Raises LookupError when none is registered. Domain errors raised
        by the handler propagate unchanged to the caller.
        """
        try:
            handler = self._command_handlers[type(command)]
        except KeyError:
            raise LookupError(f"No handler registered for command {type(command).__name__}")

        logger.debug(f"Handling command: {type(command).__name__}")
        return handler(command)

    def publish_events(self, events: List[DomainEvent]):
        """
        Deliver each event to its subscribers.

        Called after the surrounding transaction committed, so a failing
        subscriber cannot undo the state change; it is logged and the
        remaining subscribers still run.
        """
        for event in events:
            subscribers = self._subscribers.get(event.name)
            if not subscribers:
                logger.info(f"Event {event.name} has no subscribers")
                continue

            logger.info(f"Publishing {event.name} (ID: {event.event_id}) to {len(subscribers)} subscriber(s)")
            for handler in subscribers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"Subscriber {getattr(handler, '__name__', handler)} failed on {event.name} "
                        f"(ID: {event.event_id})"
                    )


# Process-wide bus; apps register their handlers in AppConfig.ready()
message_bus = MessageBus()
