"""
Availability Calendar

This is the single authoritative conflict check of the booking engine.
Every "is this range free?" question must go through AvailabilityCalendar
rather than re-implementing overlap logic.

Only CONFIRMED reservations occupy the calendar. Pending requests may
overlap each other freely; confirmation is what makes a range binding.
Confirmed reservations whose dates have already passed still count.

Strategy:
1. Domain check: has_conflict() over the car's confirmed reservations
2. Serialization: callers run check-then-accept inside store.locked(car_id)
"""

from typing import List, Set
from uuid import UUID

from shared.domain.value_objects import CalendarDate, DateRange
from apps.reservations.domain.entities import Reservation
from apps.reservations.domain.lifecycle import ReservationStatus
from apps.reservations.domain.ports import ReservationStore


class AvailabilityCalendar:
    """
    Per-car view over confirmed reservations

    Reads are side-effect free. Cost is linear in the number of
    reservations on the car.

    Usage:
        calendar = AvailabilityCalendar(reservation_store)
        with reservation_store.locked(car_id):
            if calendar.has_conflict(car_id, dates, excluding_reservation_id=r.id):
                raise ConflictError(...)
            r.accept()
            reservation_store.save(r)
    """

    def __init__(self, store: ReservationStore):
        self.store = store

    def confirmed_reservations(self, car_id: UUID) -> List[Reservation]:
        return [
            reservation
            for reservation in self.store.list_by_car(car_id)
            if reservation.status is ReservationStatus.CONFIRMED
        ]

    def blocked_dates(self, car_id: UUID) -> Set[CalendarDate]:
        """Every individual date covered by a confirmed reservation"""
        blocked: Set[CalendarDate] = set()
        for reservation in self.confirmed_reservations(car_id):
            blocked.update(reservation.dates.dates())
        return blocked

    def conflicting_reservations(
        self,
        car_id: UUID,
        candidate: DateRange,
        excluding_reservation_id: UUID | None = None,
    ) -> List[Reservation]:
        """Confirmed reservations overlapping `candidate`, in start order"""
        conflicts = [
            reservation
            for reservation in self.confirmed_reservations(car_id)
            if reservation.id != excluding_reservation_id
            and reservation.dates.overlaps(candidate)
        ]
        return sorted(conflicts, key=lambda r: r.dates.start)

    def has_conflict(
        self,
        car_id: UUID,
        candidate: DateRange,
        excluding_reservation_id: UUID | None = None,
    ) -> bool:
        """
        Check whether `candidate` overlaps a confirmed reservation

        Args:
            car_id: Car to check
            candidate: Inclusive date range to test
            excluding_reservation_id: Reservation to ignore, used when
                re-checking a reservation against its own car

        Returns:
            True if any other confirmed reservation overlaps the range
        """
        return bool(self.conflicting_reservations(car_id, candidate, excluding_reservation_id))
