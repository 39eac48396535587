"""
Reservation Domain Events

Events that represent things that have happened to a reservation.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money, DateRange


@dataclass
class ReservationRequested(DomainEvent):
    """
    Event: A renter requested a car (-> PENDING)

    Triggers:
    - Notify the car owner that a decision is needed
    """
    reservation_id: UUID
    car_id: UUID
    renter_id: UUID
    dates: DateRange
    total_price: Money


@dataclass
class ReservationConfirmed(DomainEvent):
    """
    Event: Owner accepted the request (PENDING -> CONFIRMED)

    The dates are now blocked on the car's calendar.
    """
    reservation_id: UUID
    car_id: UUID
    renter_id: UUID
    dates: DateRange


@dataclass
class ReservationRejected(DomainEvent):
    """Event: Owner rejected the request (PENDING -> CANCELLED)"""
    reservation_id: UUID
    car_id: UUID
    renter_id: UUID


@dataclass
class ReservationCancelled(DomainEvent):
    """
    Event: Reservation was cancelled by the renter or the owner

    Triggers:
    - Notify the other party
    - Free up the car's dates if the reservation was confirmed
    """
    reservation_id: UUID
    car_id: UUID
    cancelled_by: str
    old_status: str  # Status before cancellation
