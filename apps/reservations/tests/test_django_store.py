"""Tests for the ORM-backed car registry and reservation store."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
from django.contrib.auth import get_user_model

from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import CalendarDate, DateRange, Money
from apps.cars.models import Car as CarModel
from apps.reservations.application.booking_service import BookingService
from apps.reservations.application.command_handlers import Decision
from apps.reservations.domain.events import ReservationConfirmed, ReservationRequested
from apps.reservations.domain.exceptions import NotFoundError
from apps.reservations.domain.lifecycle import Actor, ReservationStatus
from apps.reservations.domain.pricing import ExtraKind, InsuranceTier
from apps.reservations.infrastructure.repositories import DjangoCarRegistry, DjangoReservationStore


@pytest.fixture
def users():
    user_model = get_user_model()
    return (
        user_model.objects.create_user(username="owner", password="pass"),
        user_model.objects.create_user(username="renter", password="pass"),
    )


@pytest.fixture
def car_model(users):
    owner, _ = users
    return CarModel.objects.create(owner=owner, name="Duster", brand="Dacia", price_per_day=Decimal("120.50"))


@pytest.mark.django_db
def test_registry_maps_the_car_row(car_model, users):
    car = DjangoCarRegistry().get_car(car_model.id)

    assert car.owner_id == users[0].pk
    assert car.price_per_day == Money(Decimal("120.50"), "MAD")
    assert car.is_bookable
    assert car.name == "Dacia Duster"


@pytest.mark.django_db
def test_registry_raises_not_found():
    with pytest.raises(NotFoundError):
        DjangoCarRegistry().get_car(uuid4())


@pytest.mark.django_db
def test_store_round_trip_and_update(car_model, users):
    _, renter = users
    store = DjangoReservationStore()
    service = BookingService(
        DjangoCarRegistry(),
        store,
        uow_factory=lambda: DjangoUnitOfWork(bus=MessageBus()),
        clock=lambda: CalendarDate(2024, 4, 1),
    )

    created = service.create(
        car_model.id,
        renter.pk,
        DateRange.parse("2024-05-01", "2024-05-02"),
        InsuranceTier.FULL,
        [ExtraKind.WIFI, ExtraKind.DELIVERY],
        renter_phone="+212600000000",
    )
    loaded = store.get(created.id)

    assert loaded.dates == DateRange.parse("2024-05-01", "2024-05-02")
    assert loaded.extras == frozenset({ExtraKind.WIFI, ExtraKind.DELIVERY})
    assert loaded.total_price == Money(Decimal("631.00"))
    assert loaded.renter_phone == "+212600000000"

    service.cancel(created.id, renter.pk)
    cancelled = store.get(created.id)
    assert cancelled.status is ReservationStatus.CANCELLED
    assert cancelled.cancelled_by is Actor.RENTER
    assert cancelled.cancelled_at is not None
    assert store.list_by_car(car_model.id) == [cancelled]
    assert store.list_by_renter(renter.pk) == [cancelled]
    assert store.list_by_owner(car_model.owner_id) == [cancelled]


@pytest.mark.django_db
def test_locked_requires_an_existing_car():
    with pytest.raises(NotFoundError):
        with DjangoReservationStore().locked(uuid4()):
            pass


@pytest.mark.django_db(transaction=True)
def test_events_are_published_after_commit(car_model, users):
    owner, renter = users
    bus = MessageBus()
    seen = []
    bus.register_event_handler(ReservationRequested, seen.append)
    bus.register_event_handler(ReservationConfirmed, seen.append)
    service = BookingService(
        DjangoCarRegistry(),
        DjangoReservationStore(),
        uow_factory=lambda: DjangoUnitOfWork(bus=bus),
        clock=lambda: CalendarDate(2024, 4, 1),
    )

    reservation = service.create(car_model.id, renter.pk, DateRange.parse("2024-05-01", "2024-05-03"), "basic")
    service.decide(reservation.id, owner.pk, Decision.ACCEPT)

    assert [type(e) for e in seen] == [ReservationRequested, ReservationConfirmed]
    assert service.blocked_dates(car_model.id) == {
        CalendarDate(2024, 5, 1),
        CalendarDate(2024, 5, 2),
        CalendarDate(2024, 5, 3),
    }
