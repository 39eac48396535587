"""
Reservation Pricing

Pure, deterministic price calculation for a rental:

    total = days * price_per_day + insurance(tier) + sum(extra(e) for e in extras)

Insurance and extras are flat fees per booking, not per day. Unknown tiers or
extras are rejected instead of being priced at zero.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import FrozenSet, Iterable

from shared.domain.value_objects import Money
from apps.reservations.domain.exceptions import (
    InvalidPriceError,
    InvalidRangeError,
    UnknownExtraError,
    UnknownTierError,
)


class InsuranceTier(Enum):
    """Insurance coverage chosen by the renter"""
    BASIC = 'basic'          # Civil liability
    PREMIUM = 'premium'      # Collision + theft + assistance
    FULL = 'full'            # Complete coverage


class ExtraKind(Enum):
    """Optional add-on services"""
    GPS = 'gps'
    WIFI = 'wifi'
    CHILD_SEAT = 'child_seat'
    DELIVERY = 'delivery'


INSURANCE_RATES = {
    InsuranceTier.BASIC: Decimal('50'),
    InsuranceTier.PREMIUM: Decimal('100'),
    InsuranceTier.FULL: Decimal('200'),
}

EXTRA_RATES = {
    ExtraKind.GPS: Decimal('25'),
    ExtraKind.WIFI: Decimal('40'),
    ExtraKind.CHILD_SEAT: Decimal('30'),
    ExtraKind.DELIVERY: Decimal('150'),
}


def parse_tier(value: InsuranceTier | str) -> InsuranceTier:
    """Accept an enum member or its wire value"""
    if isinstance(value, InsuranceTier):
        return value
    try:
        return InsuranceTier(value)
    except ValueError:
        raise UnknownTierError(f"Unknown insurance tier: {value!r}") from None


def parse_extras(values: Iterable[ExtraKind | str]) -> FrozenSet[ExtraKind]:
    """Accept enum members or wire values; duplicates collapse"""
    if isinstance(values, (str, ExtraKind)):
        raise UnknownExtraError(f"Extras must be a collection, got {values!r}")
    extras = set()
    for value in values:
        if isinstance(value, ExtraKind):
            extras.add(value)
            continue
        try:
            extras.add(ExtraKind(value))
        except ValueError:
            raise UnknownExtraError(f"Unknown extra: {value!r}") from None
    return frozenset(extras)


def insurance_cost(tier: InsuranceTier | str) -> Decimal:
    tier = parse_tier(tier)
    if tier not in INSURANCE_RATES:
        raise UnknownTierError(f"No rate configured for insurance tier {tier.value}")
    return INSURANCE_RATES[tier]


def extra_cost(extra: ExtraKind | str) -> Decimal:
    (kind,) = parse_extras([extra])
    if kind not in EXTRA_RATES:
        raise UnknownExtraError(f"No rate configured for extra {kind.value}")
    return EXTRA_RATES[kind]


def compute_total(
    days: int,
    tier: InsuranceTier | str,
    extras: Iterable[ExtraKind | str],
    price_per_day: Money | Decimal | int,
) -> Money:
    """
    Compute the total price of a rental

    Args:
        days: Rental length in days (inclusive count, must be > 0)
        tier: Insurance tier
        extras: Selected extras (set semantics)
        price_per_day: Daily rate of the car

    Raises:
        InvalidRangeError: If days is not a positive integer
        InvalidPriceError: If the daily rate is not a positive amount
        UnknownTierError / UnknownExtraError: On unrecognized keys
    """
    if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
        raise InvalidRangeError(f"Rental length must be a positive number of days, got {days!r}")

    if not isinstance(price_per_day, Money):
        try:
            price_per_day = Money(Decimal(str(price_per_day)))
        except (ValueError, InvalidOperation):
            raise InvalidPriceError(f"Invalid daily rate: {price_per_day!r}") from None
    if price_per_day.amount <= 0:
        raise InvalidPriceError(f"Daily rate must be positive, got {price_per_day.amount}")

    fees = insurance_cost(tier) + sum(
        (extra_cost(extra) for extra in parse_extras(extras)),
        Decimal('0'),
    )
    return price_per_day * days + Money(fees, price_per_day.currency)
