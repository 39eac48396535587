"""
Message Bus

Routes booking commands to their single handler and fans reservation
events out to their subscribers.

BookingService owns a private bus for its three commands. Event
subscribers (the audit log) live on the module-level ``message_bus``,
which DjangoUnitOfWork publishes to after commit.
"""

from typing import Dict, List, Callable, Type, Any
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class MessageBus:
    """Commands map 1:1 to handlers, events 1:N to subscribers"""

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._command_handlers: Dict[Type, Callable] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ):
        """Subscribe `handler` to `event_type`; subscribing twice is a no-op"""
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__name__', handler)} to {event_type.__name__}")

    def register_command_handler(
        self,
        command_type: Type,
        handler: Callable[[Any], Any]
    ):
        if command_type in self._command_handlers:
            raise ValueError(f"{command_type.__name__} already has a handler")
        self._command_handlers[command_type] = handler

    def handle_command(self, command: Any) -> Any:
        """
        Run the handler registered for `command` and return its result

        Domain errors raised by the handler reach the caller unchanged.
        Raises ValueError for a command type nobody handles.
        """
        command_type = type(command)
        handler = self._command_handlers.get(command_type)

        if not handler:
            raise ValueError(f"No handler registered for command {command_type.__name__}")

        try:
            return handler(command)
        except Exception as e:
            logger.warning(f"{command_type.__name__} failed: {e}")
            raise

    def publish_events(self, events: List[DomainEvent]):
        """
        Deliver committed events to their subscribers

        A failing subscriber is logged and skipped. The reservation change
        that raised the event is already committed and stays so.
        """
        for event in events:
            event_type = type(event)
            handlers = self._event_handlers.get(event_type, [])

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Subscriber {getattr(handler, '__name__', handler)} "
                        f"failed on {event_type.__name__} {event.event_id}: {e}",
                        exc_info=True
                    )


# Process-wide subscriptions, filled by ReservationsConfig.ready()
message_bus = MessageBus()
