"""
Reservation Ports

Interfaces of the collaborators the booking engine depends on. Storage
technology is an adapter concern; see apps.reservations.infrastructure.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import List
from uuid import UUID

from apps.reservations.domain.entities import Car, Reservation


class CarRegistry(ABC):
    """Read access to the cars that can be booked"""

    @abstractmethod
    def get_car(self, car_id: UUID) -> Car:
        """
        Raises:
            NotFoundError: If no car has this id
        """
        raise NotImplementedError


class ReservationStore(ABC):
    """
    Persistence of reservations

    Implementations must provide locked(car_id): a critical section during
    which no other writer holding the same car's lock can run. Different
    cars never contend.
    """

    @abstractmethod
    def get(self, reservation_id: UUID) -> Reservation:
        """
        Raises:
            NotFoundError: If no reservation has this id
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, reservation: Reservation) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_by_car(self, car_id: UUID) -> List[Reservation]:
        raise NotImplementedError

    @abstractmethod
    def list_by_renter(self, renter_id) -> List[Reservation]:
        raise NotImplementedError

    @abstractmethod
    def list_by_owner(self, owner_id) -> List[Reservation]:
        """Reservations on every car owned by `owner_id`"""
        raise NotImplementedError

    @abstractmethod
    def locked(self, car_id: UUID) -> AbstractContextManager:
        """Single-writer critical section for one car"""
        raise NotImplementedError
