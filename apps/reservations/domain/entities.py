"""
Reservation Domain Entities

Core business entities of the booking engine:
- Car: The engine's read-only view of a rentable car
- Reservation: Aggregate root for a renter's request on a car
- PaymentMethod: Recorded metadata only, nothing is charged
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet
from uuid import UUID

from shared.domain.base import Aggregate
from shared.domain.value_objects import CalendarDate, DateRange, Money
from apps.reservations.domain.exceptions import InvalidPriceError, UnknownPaymentMethodError
from apps.reservations.domain.lifecycle import (
    Action,
    Actor,
    PresentationStatus,
    ReservationStatus,
    next_status,
    presentation_status,
)
from apps.reservations.domain.pricing import ExtraKind, InsuranceTier


class PaymentMethod(Enum):
    CARD = 'card'
    CASH = 'cash'


def parse_payment_method(value: PaymentMethod | str) -> PaymentMethod:
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(value)
    except ValueError:
        raise UnknownPaymentMethodError(f"Unknown payment method: {value!r}") from None


@dataclass(frozen=True)
class Car:
    """
    Car as seen by the booking engine

    Only the owner and the daily rate matter for booking. A car under
    maintenance is not bookable.
    """
    id: UUID
    owner_id: UUID | int
    price_per_day: Money
    name: str = ''
    is_bookable: bool = True

    def __post_init__(self):
        if self.price_per_day.amount <= 0:
            raise InvalidPriceError(f"Price per day must be positive, got {self.price_per_day.amount}")


@dataclass(eq=False)
class Reservation(Aggregate):
    """
    Reservation Aggregate Root

    A renter's request to rent one car over an inclusive range of calendar
    dates. Reservations are never deleted: cancellation is a status change.

    Key invariants:
    - total_price is fixed at creation and never recomputed
    - status only changes through accept(), reject() and cancel()
    - Confirmed reservations of one car never overlap (enforced by the
      booking service, which owns the availability check)
    """

    # References
    car_id: UUID
    renter_id: UUID | int

    # Booking details
    dates: DateRange
    insurance_tier: InsuranceTier
    extras: FrozenSet[ExtraKind]
    total_price: Money

    # Status tracking
    status: ReservationStatus = ReservationStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CARD

    # Renter contact information
    renter_name: str = ''
    renter_email: str = ''
    renter_phone: str = ''

    # Decision / cancellation details
    decided_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by: Actor | None = None

    def __post_init__(self):
        self.extras = frozenset(self.extras)

    @classmethod
    def request(
        cls,
        car_id: UUID,
        renter_id: UUID | int,
        dates: DateRange,
        insurance_tier: InsuranceTier,
        extras: FrozenSet[ExtraKind],
        total_price: Money,
        **details,
    ) -> 'Reservation':
        """
        Create a new PENDING reservation

        Events: ReservationRequested
        """
        from apps.reservations.domain.events import ReservationRequested

        reservation = cls(
            car_id=car_id,
            renter_id=renter_id,
            dates=dates,
            insurance_tier=insurance_tier,
            extras=extras,
            total_price=total_price,
            **details,
        )
        reservation.add_event(ReservationRequested(
            aggregate_id=reservation.id,
            reservation_id=reservation.id,
            car_id=car_id,
            renter_id=renter_id,
            dates=dates,
            total_price=total_price,
        ))
        return reservation

    def presentation_status(self, today: CalendarDate) -> PresentationStatus:
        """Display status as of `today`; never mutates the reservation"""
        return presentation_status(self.status, self.dates, today)

    def accept(self, actor: Actor = Actor.OWNER):
        """
        Accept the request (PENDING -> CONFIRMED)

        The caller must have checked availability under the car's lock.
        Events: ReservationConfirmed
        """
        from apps.reservations.domain.events import ReservationConfirmed

        self.status = next_status(self.status, Action.ACCEPT, actor, self.dates)
        self.decided_at = datetime.now()
        self.touch()

        self.add_event(ReservationConfirmed(
            aggregate_id=self.id,
            reservation_id=self.id,
            car_id=self.car_id,
            renter_id=self.renter_id,
            dates=self.dates,
        ))

    def reject(self, actor: Actor = Actor.OWNER):
        """
        Reject the request (PENDING -> CANCELLED)

        Events: ReservationRejected
        """
        from apps.reservations.domain.events import ReservationRejected

        self.status = next_status(self.status, Action.REJECT, actor, self.dates)
        self.decided_at = datetime.now()
        self.touch()

        self.add_event(ReservationRejected(
            aggregate_id=self.id,
            reservation_id=self.id,
            car_id=self.car_id,
            renter_id=self.renter_id,
        ))

    def cancel(self, actor: Actor, today: CalendarDate):
        """
        Cancel the reservation

        A renter may cancel a pending or confirmed reservation. An owner may
        only cancel a confirmed one (pending requests are rejected instead).
        Completed reservations cannot be cancelled.

        Events: ReservationCancelled
        """
        from apps.reservations.domain.events import ReservationCancelled

        old_status = self.status
        self.status = next_status(self.status, Action.CANCEL, actor, self.dates, today)
        self.cancelled_at = datetime.now()
        self.cancelled_by = actor
        self.touch()

        self.add_event(ReservationCancelled(
            aggregate_id=self.id,
            reservation_id=self.id,
            car_id=self.car_id,
            cancelled_by=actor.value,
            old_status=old_status.value,
        ))

    @property
    def is_confirmed(self) -> bool:
        return self.status is ReservationStatus.CONFIRMED

    @property
    def days(self) -> int:
        return self.dates.days_inclusive()
