"""
Booking Service

Facade exposed to the calling application. Mutations are dispatched as
commands through a MessageBus to their handlers; reads go straight to the
availability calendar and the reservation store.

Usage:
    service = BookingService(DjangoCarRegistry(), DjangoReservationStore())
    reservation = service.create(car_id, renter_id, dates, 'basic', {'gps'})
    service.decide(reservation.id, owner_id, Decision.ACCEPT)
"""

from collections import Counter
from typing import Callable, Dict, Iterable, List, Set
from uuid import UUID

from shared.application.message_bus import MessageBus
from shared.application.uow import AbstractUnitOfWork, DjangoUnitOfWork
from shared.domain.value_objects import CalendarDate, DateRange
from apps.reservations.application.command_handlers import (
    CancelReservationCommand,
    CancelReservationHandler,
    CreateReservationCommand,
    CreateReservationHandler,
    Decision,
    DecideReservationCommand,
    DecideReservationHandler,
    parse_decision,
)
from apps.reservations.domain.availability import AvailabilityCalendar
from apps.reservations.domain.entities import PaymentMethod, Reservation, parse_payment_method
from apps.reservations.domain.lifecycle import PresentationStatus
from apps.reservations.domain.ports import CarRegistry, ReservationStore


def _default_clock() -> CalendarDate:
    from shared.infrastructure.clock import local_today
    return local_today()


class BookingService:
    """
    Booking engine entry point

    Args:
        car_registry: Source of Car records
        reservation_store: Reservation persistence with per-car locking
        uow_factory: Builds the unit of work wrapping each mutation
        clock: Returns today's calendar date in the platform time zone
    """

    def __init__(
        self,
        car_registry: CarRegistry,
        reservation_store: ReservationStore,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
        clock: Callable[[], CalendarDate] = _default_clock,
    ):
        self.car_registry = car_registry
        self.reservation_store = reservation_store
        self.clock = clock
        self.calendar = AvailabilityCalendar(reservation_store)

        self.bus = MessageBus()
        self.bus.register_command_handler(
            CreateReservationCommand,
            CreateReservationHandler(car_registry, reservation_store, uow_factory, clock).handle,
        )
        self.bus.register_command_handler(
            DecideReservationCommand,
            DecideReservationHandler(car_registry, reservation_store, uow_factory).handle,
        )
        self.bus.register_command_handler(
            CancelReservationCommand,
            CancelReservationHandler(car_registry, reservation_store, uow_factory, clock).handle,
        )

    # ===== Mutations =====

    def create(
        self,
        car_id: UUID,
        renter_id,
        dates: DateRange,
        tier,
        extras: Iterable = (),
        payment_method: PaymentMethod | str = PaymentMethod.CARD,
        renter_name: str = '',
        renter_email: str = '',
        renter_phone: str = '',
    ) -> Reservation:
        return self.bus.handle_command(CreateReservationCommand(
            car_id=car_id,
            renter_id=renter_id,
            dates=dates,
            insurance_tier=tier,
            extras=extras,
            payment_method=parse_payment_method(payment_method),
            renter_name=renter_name,
            renter_email=renter_email,
            renter_phone=renter_phone,
        ))

    def decide(self, reservation_id: UUID, owner_id, outcome: Decision | str) -> Reservation:
        return self.bus.handle_command(DecideReservationCommand(
            reservation_id=reservation_id,
            owner_id=owner_id,
            decision=parse_decision(outcome),
        ))

    def cancel(self, reservation_id: UUID, actor_id) -> Reservation:
        return self.bus.handle_command(CancelReservationCommand(
            reservation_id=reservation_id,
            actor_id=actor_id,
        ))

    # ===== Queries =====

    def presentation_status(
        self,
        reservation: Reservation,
        today: CalendarDate | None = None,
    ) -> PresentationStatus:
        """Display status of `reservation` as of `today` (defaults to the clock)"""
        return reservation.presentation_status(today or self.clock())

    def blocked_dates(self, car_id: UUID) -> Set[CalendarDate]:
        return self.calendar.blocked_dates(car_id)

    def has_conflict(
        self,
        car_id: UUID,
        candidate: DateRange,
        excluding_reservation_id: UUID | None = None,
    ) -> bool:
        return self.calendar.has_conflict(car_id, candidate, excluding_reservation_id)

    def get(self, reservation_id: UUID) -> Reservation:
        return self.reservation_store.get(reservation_id)

    def list_for_renter(
        self,
        renter_id,
        status: PresentationStatus | str | None = None,
        today: CalendarDate | None = None,
    ) -> List[Reservation]:
        """Renter's reservations, optionally narrowed to one presentation status"""
        return self._filter(self.reservation_store.list_by_renter(renter_id), status, today)

    def list_for_owner(
        self,
        owner_id,
        status: PresentationStatus | str | None = None,
        today: CalendarDate | None = None,
    ) -> List[Reservation]:
        """Reservations on every car of `owner_id`, optionally narrowed"""
        return self._filter(self.reservation_store.list_by_owner(owner_id), status, today)

    def _filter(self, reservations, status, today):
        if status is None:
            return reservations
        status = PresentationStatus(status)
        today = today or self.clock()
        return [r for r in reservations if r.presentation_status(today) is status]

    def status_counts(
        self,
        reservations: Iterable[Reservation],
        today: CalendarDate | None = None,
    ) -> Dict[str, int]:
        """
        Count reservations per presentation status

        Every status is present in the result, zero when unused.
        """
        today = today or self.clock()
        counts = Counter(r.presentation_status(today).value for r in reservations)
        return {status.value: counts.get(status.value, 0) for status in PresentationStatus}
