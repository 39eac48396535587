"""Tests for the reservation state machine and presentation status."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from shared.domain.value_objects import CalendarDate, DateRange, Money
from apps.reservations.domain.entities import Reservation
from apps.reservations.domain.events import ReservationCancelled, ReservationConfirmed, ReservationRequested
from apps.reservations.domain.exceptions import ForbiddenTransitionError
from apps.reservations.domain.lifecycle import (
    Action,
    Actor,
    PresentationStatus,
    ReservationStatus,
    next_status,
    presentation_status,
)
from apps.reservations.domain.pricing import InsuranceTier

RANGE = DateRange.parse("2024-05-01", "2024-05-03")


def make_reservation(status=ReservationStatus.PENDING) -> Reservation:
    return Reservation(
        car_id=uuid4(),
        renter_id=uuid4(),
        dates=RANGE,
        insurance_tier=InsuranceTier.BASIC,
        extras=frozenset(),
        total_price=Money(Decimal("350")),
        status=status,
    )


@pytest.mark.parametrize(
    "today, expected",
    [
        (CalendarDate(2024, 4, 30), PresentationStatus.UPCOMING),
        (CalendarDate(2024, 5, 1), PresentationStatus.ACTIVE),
        (CalendarDate(2024, 5, 3), PresentationStatus.ACTIVE),
        (CalendarDate(2024, 5, 4), PresentationStatus.COMPLETED),
    ],
)
def test_confirmed_presentation_follows_the_calendar(today, expected):
    assert presentation_status(ReservationStatus.CONFIRMED, RANGE, today) is expected


def test_pending_and_cancelled_ignore_the_calendar():
    for today in (CalendarDate(2024, 1, 1), CalendarDate(2024, 5, 2), CalendarDate(2025, 1, 1)):
        assert presentation_status(ReservationStatus.PENDING, RANGE, today) is PresentationStatus.PENDING
        assert presentation_status(ReservationStatus.CANCELLED, RANGE, today) is PresentationStatus.CANCELLED


def test_presentation_status_does_not_mutate():
    reservation = make_reservation(ReservationStatus.CONFIRMED)
    today = CalendarDate(2024, 6, 1)
    first = reservation.presentation_status(today)
    second = reservation.presentation_status(today)
    assert first is second is PresentationStatus.COMPLETED
    assert reservation.status is ReservationStatus.CONFIRMED


@pytest.mark.parametrize(
    "status, action, actor, expected",
    [
        (ReservationStatus.PENDING, Action.ACCEPT, Actor.OWNER, ReservationStatus.CONFIRMED),
        (ReservationStatus.PENDING, Action.REJECT, Actor.OWNER, ReservationStatus.CANCELLED),
        (ReservationStatus.PENDING, Action.CANCEL, Actor.RENTER, ReservationStatus.CANCELLED),
        (ReservationStatus.CONFIRMED, Action.CANCEL, Actor.RENTER, ReservationStatus.CANCELLED),
        (ReservationStatus.CONFIRMED, Action.CANCEL, Actor.OWNER, ReservationStatus.CANCELLED),
    ],
)
def test_allowed_transitions(status, action, actor, expected):
    assert next_status(status, action, actor, RANGE, CalendarDate(2024, 4, 1)) is expected


@pytest.mark.parametrize(
    "status, action, actor",
    [
        (ReservationStatus.PENDING, Action.ACCEPT, Actor.RENTER),
        (ReservationStatus.PENDING, Action.REJECT, Actor.RENTER),
        (ReservationStatus.PENDING, Action.CANCEL, Actor.OWNER),
        (ReservationStatus.CONFIRMED, Action.ACCEPT, Actor.OWNER),
        (ReservationStatus.CONFIRMED, Action.REJECT, Actor.OWNER),
        (ReservationStatus.CANCELLED, Action.ACCEPT, Actor.OWNER),
        (ReservationStatus.CANCELLED, Action.CANCEL, Actor.RENTER),
    ],
)
def test_forbidden_transitions(status, action, actor):
    with pytest.raises(ForbiddenTransitionError):
        next_status(status, action, actor, RANGE, CalendarDate(2024, 4, 1))


def test_completed_reservation_cannot_be_cancelled():
    reservation = make_reservation(ReservationStatus.CONFIRMED)
    with pytest.raises(ForbiddenTransitionError):
        reservation.cancel(Actor.RENTER, CalendarDate(2024, 5, 4))
    assert reservation.status is ReservationStatus.CONFIRMED
    assert reservation.events == []


def test_active_reservation_can_still_be_cancelled():
    reservation = make_reservation(ReservationStatus.CONFIRMED)
    reservation.cancel(Actor.OWNER, CalendarDate(2024, 5, 3))
    assert reservation.status is ReservationStatus.CANCELLED
    assert reservation.cancelled_by is Actor.OWNER
    (event,) = reservation.events
    assert isinstance(event, ReservationCancelled)
    assert event.old_status == "confirmed"


def test_request_and_accept_emit_events():
    reservation = Reservation.request(
        car_id=uuid4(),
        renter_id=uuid4(),
        dates=RANGE,
        insurance_tier=InsuranceTier.BASIC,
        extras=frozenset(),
        total_price=Money(Decimal("350")),
    )
    reservation.accept()
    assert [type(e) for e in reservation.events] == [ReservationRequested, ReservationConfirmed]
    assert reservation.decided_at is not None
    assert reservation.days == 3
