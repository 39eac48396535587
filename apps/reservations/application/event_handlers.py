"""
Reservation Event Handlers

Subscribers wired onto the global message bus when the app starts.
They run after the transaction that produced the event has committed.
"""

import structlog

from shared.application.message_bus import MessageBus
from apps.reservations.domain.events import (
    ReservationCancelled,
    ReservationConfirmed,
    ReservationRejected,
    ReservationRequested,
)

logger = structlog.get_logger(__name__)


def audit_reservation_event(event):
    """Write one structured audit line per reservation event"""
    logger.info(
        "reservation.event",
        **event.to_dict(),
        reservation_id=str(event.reservation_id),
        car_id=str(event.car_id),
    )


def register_event_handlers(bus: MessageBus):
    for event_type in (
        ReservationRequested,
        ReservationConfirmed,
        ReservationRejected,
        ReservationCancelled,
    ):
        bus.register_event_handler(event_type, audit_reservation_event)
