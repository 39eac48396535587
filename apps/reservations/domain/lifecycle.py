"""
Reservation Lifecycle

Persisted states and the guarded transition table of a reservation:

    PENDING   --accept (owner, no conflict)-->             CONFIRMED
    PENDING   --reject (owner)-->                          CANCELLED
    PENDING   --cancel (renter)-->                         CANCELLED
    CONFIRMED --cancel (renter|owner, not completed)-->    CANCELLED

There is no persisted COMPLETED or ACTIVE state. What a reservation looks
like to users is derived from (status, dates, today) by presentation_status(),
so nothing has to sweep reservations as time passes.

The "no conflict" guard on accept needs the availability calendar and is
enforced by the booking service inside the per-car critical section.
"""

from enum import Enum
from typing import Dict, FrozenSet, Tuple

from shared.domain.value_objects import CalendarDate, DateRange
from apps.reservations.domain.exceptions import ForbiddenTransitionError


class ReservationStatus(Enum):
    """Persisted reservation status"""
    PENDING = 'pending'          # Requested by renter, waiting for the owner
    CONFIRMED = 'confirmed'      # Accepted by owner, occupies the calendar
    CANCELLED = 'cancelled'      # Rejected, or cancelled by renter/owner (terminal)


class PresentationStatus(Enum):
    """Display status, derived and never stored"""
    PENDING = 'pending'
    UPCOMING = 'upcoming'
    ACTIVE = 'active'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class Actor(Enum):
    """Role of the user acting on a reservation"""
    RENTER = 'renter'
    OWNER = 'owner'


class Action(Enum):
    ACCEPT = 'accept'
    REJECT = 'reject'
    CANCEL = 'cancel'


TRANSITIONS: Dict[Tuple[ReservationStatus, Action], Tuple[FrozenSet[Actor], ReservationStatus]] = {
    (ReservationStatus.PENDING, Action.ACCEPT): (frozenset({Actor.OWNER}), ReservationStatus.CONFIRMED),
    (ReservationStatus.PENDING, Action.REJECT): (frozenset({Actor.OWNER}), ReservationStatus.CANCELLED),
    (ReservationStatus.PENDING, Action.CANCEL): (frozenset({Actor.RENTER}), ReservationStatus.CANCELLED),
    (ReservationStatus.CONFIRMED, Action.CANCEL): (
        frozenset({Actor.RENTER, Actor.OWNER}),
        ReservationStatus.CANCELLED,
    ),
}


def presentation_status(
    status: ReservationStatus,
    dates: DateRange,
    today: CalendarDate,
) -> PresentationStatus:
    """
    Derive the display status of a reservation

    Pure function of its arguments; calling it never changes anything.
    """
    if status is ReservationStatus.PENDING:
        return PresentationStatus.PENDING
    if status is ReservationStatus.CANCELLED:
        return PresentationStatus.CANCELLED
    if today < dates.start:
        return PresentationStatus.UPCOMING
    if today > dates.end:
        return PresentationStatus.COMPLETED
    return PresentationStatus.ACTIVE


def next_status(
    status: ReservationStatus,
    action: Action,
    actor: Actor,
    dates: DateRange,
    today: CalendarDate | None = None,
) -> ReservationStatus:
    """
    Resolve the target state of a transition

    Raises:
        ForbiddenTransitionError: If the action is not defined from `status`,
            the actor may not perform it, or a completed reservation is
            being cancelled.
    """
    rule = TRANSITIONS.get((status, action))
    if rule is None:
        raise ForbiddenTransitionError(
            f"Cannot {action.value} a reservation with status {status.value}"
        )

    allowed_actors, target = rule
    if actor not in allowed_actors:
        raise ForbiddenTransitionError(
            f"The {actor.value} cannot {action.value} a reservation with status {status.value}"
        )

    if status is ReservationStatus.CONFIRMED and action is Action.CANCEL:
        if today is None:
            raise ValueError("today is required to cancel a confirmed reservation")
        if presentation_status(status, dates, today) is PresentationStatus.COMPLETED:
            raise ForbiddenTransitionError("Cannot cancel a completed reservation")

    return target
