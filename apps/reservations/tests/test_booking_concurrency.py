"""Concurrent owner decisions on one car must never confirm overlapping ranges."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from itertools import combinations
from uuid import uuid4

from shared.domain.value_objects import DateRange, Money
from apps.reservations.application.command_handlers import Decision
from apps.reservations.domain.entities import Car
from apps.reservations.domain.exceptions import ConflictError
from apps.reservations.domain.lifecycle import ReservationStatus


def _race(service, owner_id, reservation_ids):
    barrier = threading.Barrier(len(reservation_ids))

    def accept(reservation_id):
        barrier.wait()
        try:
            service.decide(reservation_id, owner_id, Decision.ACCEPT)
            return "confirmed"
        except ConflictError:
            return "conflict"

    with ThreadPoolExecutor(max_workers=len(reservation_ids)) as pool:
        return list(pool.map(accept, reservation_ids))


def test_only_one_of_many_overlapping_acceptances_wins(service, car, owner_id):
    requests = [
        service.create(car.id, uuid4(), DateRange.parse("2024-05-01", "2024-05-05"), "basic")
        for _ in range(8)
    ]

    outcomes = _race(service, owner_id, [r.id for r in requests])

    assert outcomes.count("confirmed") == 1
    assert outcomes.count("conflict") == 7
    confirmed = [r for r in service.list_for_owner(owner_id) if r.status is ReservationStatus.CONFIRMED]
    assert len(confirmed) == 1


def test_confirmed_ranges_stay_pairwise_disjoint(service, car, owner_id):
    ranges = [
        ("2024-05-01", "2024-05-03"),
        ("2024-05-03", "2024-05-06"),
        ("2024-05-05", "2024-05-08"),
        ("2024-05-09", "2024-05-10"),
        ("2024-05-02", "2024-05-09"),
        ("2024-05-11", "2024-05-11"),
    ]
    requests = [
        service.create(car.id, uuid4(), DateRange.parse(start, end), "basic") for start, end in ranges
    ]

    _race(service, owner_id, [r.id for r in requests])

    confirmed = [r for r in service.list_for_owner(owner_id) if r.status is ReservationStatus.CONFIRMED]
    assert confirmed
    for first, second in combinations(confirmed, 2):
        assert not first.dates.overlaps(second.dates)


def test_different_cars_do_not_block_each_other(service, registry, car, owner_id):
    other = registry.add(Car(id=uuid4(), owner_id=owner_id, price_per_day=Money(Decimal("80"))))
    dates = DateRange.parse("2024-05-01", "2024-05-05")
    requests = [service.create(c.id, uuid4(), dates, "basic") for c in (car, other)]

    outcomes = _race(service, owner_id, [r.id for r in requests])

    assert outcomes == ["confirmed", "confirmed"]
