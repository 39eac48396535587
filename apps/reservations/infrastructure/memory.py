"""
In-Memory Adapters

Process-local implementations of the CarRegistry and ReservationStore
ports, used by the domain tests and by tooling that runs the engine
without a database. Each car gets its own threading.Lock, so decisions on
different cars never contend.

Stored objects are copied on the way in and out, so callers cannot change
stored state without calling save().
"""

from contextlib import contextmanager
from copy import deepcopy
from typing import Dict, Iterator, List
from uuid import UUID
import threading

from apps.reservations.domain.entities import Car, Reservation
from apps.reservations.domain.exceptions import NotFoundError
from apps.reservations.domain.ports import CarRegistry, ReservationStore


class InMemoryCarRegistry(CarRegistry):

    def __init__(self, cars=()):
        self._cars: Dict[UUID, Car] = {car.id: car for car in cars}

    def add(self, car: Car) -> Car:
        self._cars[car.id] = car
        return car

    def get_car(self, car_id: UUID) -> Car:
        try:
            return self._cars[car_id]
        except KeyError:
            raise NotFoundError(f"Car {car_id} not found") from None

    def cars_owned_by(self, owner_id) -> List[Car]:
        return [car for car in self._cars.values() if car.owner_id == owner_id]


class InMemoryReservationStore(ReservationStore):

    def __init__(self, car_registry: InMemoryCarRegistry | None = None):
        self.car_registry = car_registry
        self._reservations: Dict[UUID, Reservation] = {}
        self._data_lock = threading.Lock()
        self._car_locks: Dict[UUID, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def get(self, reservation_id: UUID) -> Reservation:
        with self._data_lock:
            try:
                return deepcopy(self._reservations[reservation_id])
            except KeyError:
                raise NotFoundError(f"Reservation {reservation_id} not found") from None

    def save(self, reservation: Reservation) -> None:
        with self._data_lock:
            stored = deepcopy(reservation)
            stored.clear_events()
            self._reservations[reservation.id] = stored

    def list_by_car(self, car_id: UUID) -> List[Reservation]:
        return self._select(lambda r: r.car_id == car_id)

    def list_by_renter(self, renter_id) -> List[Reservation]:
        return self._select(lambda r: r.renter_id == renter_id)

    def list_by_owner(self, owner_id) -> List[Reservation]:
        if self.car_registry is None:
            raise RuntimeError("list_by_owner needs a car registry")
        car_ids = {car.id for car in self.car_registry.cars_owned_by(owner_id)}
        return self._select(lambda r: r.car_id in car_ids)

    @contextmanager
    def locked(self, car_id: UUID) -> Iterator[None]:
        with self._locks_guard:
            lock = self._car_locks.setdefault(car_id, threading.Lock())
        with lock:
            yield

    def _select(self, predicate) -> List[Reservation]:
        with self._data_lock:
            selected = [deepcopy(r) for r in self._reservations.values() if predicate(r)]
        return sorted(selected, key=lambda r: (r.dates.start, r.created_at))
