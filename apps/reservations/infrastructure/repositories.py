"""
Django Adapters

ORM-backed implementations of the CarRegistry and ReservationStore ports.
Model instances never leave this module: callers only see domain objects.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List
from uuid import UUID
import logging

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.value_objects import CalendarDate, DateRange, Money
from apps.cars.models import Car as CarModel
from apps.reservations.domain.entities import Car, PaymentMethod, Reservation
from apps.reservations.domain.exceptions import NotFoundError
from apps.reservations.domain.lifecycle import Actor, ReservationStatus
from apps.reservations.domain.ports import CarRegistry, ReservationStore
from apps.reservations.domain.pricing import ExtraKind, InsuranceTier
from apps.reservations.models import Reservation as ReservationModel

logger = logging.getLogger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and timezone.is_naive(value):
        return timezone.make_aware(value)
    return value


class DjangoCarRegistry(CarRegistry):

    def get_car(self, car_id: UUID) -> Car:
        try:
            model = CarModel.objects.get(pk=car_id)
        except CarModel.DoesNotExist:
            raise NotFoundError(f"Car {car_id} not found") from None
        return self.to_domain(model)

    @staticmethod
    def to_domain(model: CarModel) -> Car:
        return Car(
            id=model.id,
            owner_id=model.owner_id,
            price_per_day=Money(model.price_per_day, model.currency),
            name=str(model),
            is_bookable=model.is_bookable,
        )


class DjangoReservationStore(ReservationStore):
    """
    Reservation store on top of the Django ORM

    locked(car_id) opens a transaction and takes a row lock on the car
    (SELECT ... FOR UPDATE). The lock is held until the outermost
    transaction commits, so a surrounding DjangoUnitOfWork keeps it for the
    whole check-then-accept sequence.
    """

    def get(self, reservation_id: UUID) -> Reservation:
        try:
            model = ReservationModel.objects.get(pk=reservation_id)
        except ReservationModel.DoesNotExist:
            raise NotFoundError(f"Reservation {reservation_id} not found") from None
        return self.to_domain(model)

    def save(self, reservation: Reservation) -> None:
        ReservationModel.objects.update_or_create(
            id=reservation.id,
            defaults={
                "car_id": reservation.car_id,
                "renter_id": reservation.renter_id,
                "start_date": reservation.dates.start.to_date(),
                "end_date": reservation.dates.end.to_date(),
                "insurance_tier": reservation.insurance_tier.value,
                "extras": sorted(extra.value for extra in reservation.extras),
                "total_price": reservation.total_price.amount,
                "currency": reservation.total_price.currency,
                "status": reservation.status.value,
                "payment_method": reservation.payment_method.value,
                "renter_name": reservation.renter_name,
                "renter_email": reservation.renter_email,
                "renter_phone": reservation.renter_phone,
                "decided_at": _aware(reservation.decided_at),
                "cancelled_at": _aware(reservation.cancelled_at),
                "cancelled_by": reservation.cancelled_by.value if reservation.cancelled_by else "",
                "created_at": _aware(reservation.created_at),
                "updated_at": _aware(reservation.updated_at),
            },
        )
        logger.debug(f"Saved reservation {reservation.id} ({reservation.status.value})")

    def list_by_car(self, car_id: UUID) -> List[Reservation]:
        return self._list(ReservationModel.objects.filter(car_id=car_id))

    def list_by_renter(self, renter_id) -> List[Reservation]:
        return self._list(ReservationModel.objects.filter(renter_id=renter_id))

    def list_by_owner(self, owner_id) -> List[Reservation]:
        return self._list(ReservationModel.objects.filter(car__owner_id=owner_id))

    @contextmanager
    def locked(self, car_id: UUID) -> Iterator[None]:
        with transaction.atomic():
            locked_ids = list(
                CarModel.objects.select_for_update().filter(pk=car_id).values_list("pk", flat=True)
            )
            if not locked_ids:
                raise NotFoundError(f"Car {car_id} not found")
            logger.debug(f"Acquired row lock on car {car_id}")
            yield

    def _list(self, queryset) -> List[Reservation]:
        return [self.to_domain(model) for model in queryset.order_by("start_date", "created_at")]

    @staticmethod
    def to_domain(model: ReservationModel) -> Reservation:
        return Reservation(
            id=model.id,
            created_at=model.created_at,
            updated_at=model.updated_at,
            car_id=model.car_id,
            renter_id=model.renter_id,
            dates=DateRange(
                CalendarDate.from_date(model.start_date),
                CalendarDate.from_date(model.end_date),
            ),
            insurance_tier=InsuranceTier(model.insurance_tier),
            extras=frozenset(ExtraKind(extra) for extra in model.extras),
            total_price=Money(model.total_price, model.currency),
            status=ReservationStatus(model.status),
            payment_method=PaymentMethod(model.payment_method),
            renter_name=model.renter_name,
            renter_email=model.renter_email,
            renter_phone=model.renter_phone,
            decided_at=model.decided_at,
            cancelled_at=model.cancelled_at,
            cancelled_by=Actor(model.cancelled_by) if model.cancelled_by else None,
        )
