"""Shared fixtures for the booking engine tests (in-memory adapters)."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from shared.application.message_bus import MessageBus
from shared.application.uow import InMemoryUnitOfWork
from shared.domain.value_objects import CalendarDate, Money
from apps.reservations.application.booking_service import BookingService
from apps.reservations.domain.entities import Car
from apps.reservations.infrastructure.memory import InMemoryCarRegistry, InMemoryReservationStore


class FakeClock:
    """Settable "today" for tests."""

    def __init__(self, today: CalendarDate):
        self.today = today

    def __call__(self) -> CalendarDate:
        return self.today


@pytest.fixture
def clock():
    return FakeClock(CalendarDate(2024, 4, 20))


@pytest.fixture
def owner_id():
    return uuid4()


@pytest.fixture
def renter_id():
    return uuid4()


@pytest.fixture
def other_renter_id():
    return uuid4()


@pytest.fixture
def registry():
    return InMemoryCarRegistry()


@pytest.fixture
def car(registry, owner_id):
    return registry.add(Car(id=uuid4(), owner_id=owner_id, price_per_day=Money(Decimal("100")), name="Dacia Logan"))


@pytest.fixture
def store(registry):
    return InMemoryReservationStore(registry)


@pytest.fixture
def event_bus():
    return MessageBus()


@pytest.fixture
def published(event_bus):
    """Every event published through ``event_bus``, in order."""
    from apps.reservations.domain.events import (
        ReservationCancelled,
        ReservationConfirmed,
        ReservationRejected,
        ReservationRequested,
    )

    events = []
    for event_type in (ReservationRequested, ReservationConfirmed, ReservationRejected, ReservationCancelled):
        event_bus.register_event_handler(event_type, events.append)
    return events


@pytest.fixture
def service(registry, store, event_bus, clock):
    return BookingService(
        registry,
        store,
        uow_factory=lambda: InMemoryUnitOfWork(bus=event_bus),
        clock=clock,
    )
