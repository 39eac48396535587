"""
Reservation Command Handlers

These are the use cases of the booking engine.
They orchestrate domain operations within a unit of work.

Commands:
- CreateReservationCommand: A renter requests a car for a date range
- DecideReservationCommand: The car owner accepts or rejects a request
- CancelReservationCommand: The renter or the owner cancels a reservation
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable
from uuid import UUID
import logging

from shared.application.uow import AbstractUnitOfWork
from shared.domain.value_objects import CalendarDate, DateRange
from apps.reservations.domain.availability import AvailabilityCalendar
from apps.reservations.domain.entities import PaymentMethod, Reservation, parse_payment_method
from apps.reservations.domain.exceptions import (
    CarUnavailableError,
    ConflictError,
    ForbiddenTransitionError,
    InvalidRangeError,
    SelfBookingError,
    UnknownDecisionError,
)
from apps.reservations.domain.lifecycle import Action, Actor, next_status
from apps.reservations.domain.ports import CarRegistry, ReservationStore
from apps.reservations.domain.pricing import (
    ExtraKind,
    InsuranceTier,
    compute_total,
    parse_extras,
    parse_tier,
)

logger = logging.getLogger(__name__)


class Decision(Enum):
    """Owner's answer to a pending request"""
    ACCEPT = 'accept'
    REJECT = 'reject'


def parse_decision(value: Decision | str) -> Decision:
    if isinstance(value, Decision):
        return value
    try:
        return Decision(value)
    except ValueError:
        raise UnknownDecisionError(f"Unknown decision: {value!r}") from None


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    """Command to request a car for an inclusive date range"""
    car_id: UUID
    renter_id: UUID | int
    dates: DateRange
    insurance_tier: InsuranceTier | str
    extras: Iterable[ExtraKind | str] = field(default_factory=frozenset)
    payment_method: PaymentMethod = PaymentMethod.CARD
    renter_name: str = ''
    renter_email: str = ''
    renter_phone: str = ''


@dataclass
class DecideReservationCommand:
    """Command for the car owner to accept or reject a pending request"""
    reservation_id: UUID
    owner_id: UUID | int
    decision: Decision


@dataclass
class CancelReservationCommand:
    """Command to cancel a reservation (renter or car owner)"""
    reservation_id: UUID
    actor_id: UUID | int


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation command

    Creation does not consult the availability calendar. Several pending
    requests may cover the same dates; conflicts are resolved when the
    owner accepts one of them.
    """

    def __init__(
        self,
        car_registry: CarRegistry,
        reservation_store: ReservationStore,
        uow_factory: Callable[[], AbstractUnitOfWork],
        clock: Callable[[], CalendarDate],
    ):
        self.car_registry = car_registry
        self.reservation_store = reservation_store
        self.uow_factory = uow_factory
        self.clock = clock

    def handle(self, command: CreateReservationCommand) -> Reservation:
        """
        Handle reservation creation

        Returns: Created Reservation aggregate (PENDING)

        Raises:
            NotFoundError: Unknown car
            SelfBookingError: Renter owns the car
            InvalidRangeError: Range starts before today
            CarUnavailableError: Car is in maintenance
            UnknownTierError / UnknownExtraError: Malformed pricing input
        """
        logger.info(
            f"Creating reservation for car {command.car_id}, "
            f"renter {command.renter_id}, dates {command.dates}"
        )

        car = self.car_registry.get_car(command.car_id)

        if command.renter_id == car.owner_id:
            raise SelfBookingError(f"Owner {car.owner_id} cannot book their own car {car.id}")

        today = self.clock()
        if command.dates.start < today:
            raise InvalidRangeError(
                f"Start date {command.dates.start} is in the past (today is {today})"
            )

        if not car.is_bookable:
            raise CarUnavailableError(f"Car {car.id} is not available for booking")

        tier = parse_tier(command.insurance_tier)
        extras = parse_extras(command.extras)
        total_price = compute_total(
            command.dates.days_inclusive(),
            tier,
            extras,
            car.price_per_day,
        )

        with self.uow_factory() as uow:
            reservation = Reservation.request(
                car_id=car.id,
                renter_id=command.renter_id,
                dates=command.dates,
                insurance_tier=tier,
                extras=extras,
                total_price=total_price,
                payment_method=parse_payment_method(command.payment_method),
                renter_name=command.renter_name,
                renter_email=command.renter_email,
                renter_phone=command.renter_phone,
            )
            uow.collect_events(reservation)
            self.reservation_store.save(reservation)

        logger.info(
            f"Reservation {reservation.id} created for car {car.id}: "
            f"{reservation.days} day(s), total {reservation.total_price}"
        )
        return reservation


class DecideReservationHandler:
    """
    Handler for DecideReservation command

    Accepting is the one place where a check-then-act race can break the
    non-overlap invariant, so the availability check and the transition
    run inside the car's critical section:

    1. Start unit of work
    2. Enter reservation_store.locked(car_id)
    3. Reload the reservation (fresh state under the lock)
    4. Check the transition itself is allowed (only PENDING can be accepted)
    5. Re-run AvailabilityCalendar.has_conflict excluding itself
    6. Apply accept() or raise ConflictError (reservation stays PENDING)
    7. Save, leave the lock, commit, publish events
    """

    def __init__(
        self,
        car_registry: CarRegistry,
        reservation_store: ReservationStore,
        uow_factory: Callable[[], AbstractUnitOfWork],
    ):
        self.car_registry = car_registry
        self.reservation_store = reservation_store
        self.uow_factory = uow_factory
        self.calendar = AvailabilityCalendar(reservation_store)

    def handle(self, command: DecideReservationCommand) -> Reservation:
        """
        Handle owner decision

        Raises:
            NotFoundError: Unknown reservation or car
            ForbiddenTransitionError: Caller is not the owner, or the
                reservation is no longer PENDING
            ConflictError: Accepting would overlap a confirmed reservation
        """
        logger.info(
            f"Owner {command.owner_id} decides {command.decision.value} "
            f"on reservation {command.reservation_id}"
        )

        car_id = self.reservation_store.get(command.reservation_id).car_id
        car = self.car_registry.get_car(car_id)
        if command.owner_id != car.owner_id:
            raise ForbiddenTransitionError(
                f"Only the owner of car {car.id} can decide on its reservations"
            )

        with self.uow_factory() as uow:
            with self.reservation_store.locked(car_id):
                reservation = self.reservation_store.get(command.reservation_id)

                if command.decision is Decision.ACCEPT:
                    # A closed reservation fails on its state, never on availability
                    next_status(reservation.status, Action.ACCEPT, Actor.OWNER, reservation.dates)
                    conflicts = self.calendar.conflicting_reservations(
                        car_id,
                        reservation.dates,
                        excluding_reservation_id=reservation.id,
                    )
                    if conflicts:
                        logger.warning(
                            f"Reservation {reservation.id} conflicts with "
                            f"{', '.join(str(r.id) for r in conflicts)}"
                        )
                        raise ConflictError(
                            f"Dates {reservation.dates} overlap a confirmed reservation on car {car_id}",
                            conflicting_ids=[r.id for r in conflicts],
                        )
                    reservation.accept(Actor.OWNER)
                else:
                    reservation.reject(Actor.OWNER)

                uow.collect_events(reservation)
                self.reservation_store.save(reservation)

        logger.info(f"Reservation {reservation.id} is now {reservation.status.value}")
        return reservation


class CancelReservationHandler:
    """
    Handler for CancelReservation command

    Cancelling only frees dates, but it still runs under the car's lock so
    that it cannot overwrite a concurrent decision on the same reservation.
    """

    def __init__(
        self,
        car_registry: CarRegistry,
        reservation_store: ReservationStore,
        uow_factory: Callable[[], AbstractUnitOfWork],
        clock: Callable[[], CalendarDate],
    ):
        self.car_registry = car_registry
        self.reservation_store = reservation_store
        self.uow_factory = uow_factory
        self.clock = clock

    def resolve_actor(self, reservation: Reservation, actor_id) -> Actor:
        if actor_id == reservation.renter_id:
            return Actor.RENTER
        car = self.car_registry.get_car(reservation.car_id)
        if actor_id == car.owner_id:
            return Actor.OWNER
        raise ForbiddenTransitionError(
            f"User {actor_id} is neither the renter nor the owner of reservation {reservation.id}"
        )

    def handle(self, command: CancelReservationCommand) -> Reservation:
        """
        Handle cancellation

        Raises:
            NotFoundError: Unknown reservation
            ForbiddenTransitionError: Unrelated actor, already cancelled,
                completed, or an owner cancelling a pending request
        """
        logger.info(f"User {command.actor_id} cancels reservation {command.reservation_id}")

        reservation = self.reservation_store.get(command.reservation_id)
        actor = self.resolve_actor(reservation, command.actor_id)
        today = self.clock()

        with self.uow_factory() as uow:
            with self.reservation_store.locked(reservation.car_id):
                reservation = self.reservation_store.get(command.reservation_id)
                reservation.cancel(actor, today)
                uow.collect_events(reservation)
                self.reservation_store.save(reservation)

        logger.info(f"Reservation {reservation.id} cancelled by {actor.value}")
        return reservation
