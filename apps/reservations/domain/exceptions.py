"""
Reservation Domain Errors

Typed errors raised by the booking engine. None of them are retried or
swallowed by the engine; callers decide how to present them.
"""

from shared.domain.exceptions import DomainError, InvalidRangeError

__all__ = [
    'DomainError',
    'InvalidRangeError',
    'SelfBookingError',
    'ConflictError',
    'ForbiddenTransitionError',
    'UnknownTierError',
    'UnknownExtraError',
    'NotFoundError',
    'CarUnavailableError',
    'InvalidPriceError',
    'UnknownPaymentMethodError',
    'UnknownDecisionError',
]


class SelfBookingError(DomainError):
    """An owner cannot book their own car"""

    code = 'self_booking'


class ConflictError(DomainError):
    """
    Confirmation would overlap an existing confirmed reservation

    Recoverable: reject the request, or cancel the conflicting
    reservation first and retry.
    """

    code = 'conflict'

    def __init__(self, message: str = '', conflicting_ids=()):
        super().__init__(message)
        self.conflicting_ids = tuple(conflicting_ids)


class ForbiddenTransitionError(DomainError):
    """Transition not allowed for this actor or from the current state"""

    code = 'forbidden_transition'


class UnknownTierError(DomainError):
    """Unknown insurance tier"""

    code = 'unknown_tier'


class UnknownExtraError(DomainError):
    """Unknown extra"""

    code = 'unknown_extra'


class NotFoundError(DomainError):
    """Unknown car or reservation id"""

    code = 'not_found'


class CarUnavailableError(DomainError):
    """Car is in maintenance and cannot be booked"""

    code = 'car_unavailable'


class InvalidPriceError(DomainError, ValueError):
    """Daily rate is not a positive amount"""

    code = 'invalid_price'


class UnknownPaymentMethodError(DomainError):
    """Unknown payment method"""

    code = 'unknown_payment_method'


class UnknownDecisionError(DomainError):
    """Owner decision is neither accept nor reject"""

    code = 'unknown_decision'
