"""
Common Value Objects

Value objects used across multiple domains:
- CalendarDate: A (year, month, day) triple with no time of day and no zone
- DateRange: An inclusive range of calendar dates
- Money: A non-negative amount in the platform's single currency

CalendarDate is the only date representation that crosses the engine
boundary. Instants (datetime with a zone) are converted exactly once, at the
edge, with CalendarDate.from_instant().
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterator

from shared.domain.base import ValueObject
from shared.domain.exceptions import InvalidRangeError

DEFAULT_CURRENCY = 'MAD'

_CENTS = Decimal('0.01')
_ISO_DATE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')


@dataclass(frozen=True, order=True)
class CalendarDate(ValueObject):
    """
    Calendar date value object

    Equality is field-wise and ordering is lexicographic on
    (year, month, day). Invalid dates (e.g. 2023-02-29) are rejected.
    """
    year: int
    month: int
    day: int

    def __post_init__(self):
        parts = (self.year, self.month, self.day)
        if any(isinstance(p, bool) or not isinstance(p, int) for p in parts):
            raise InvalidRangeError(f"Calendar date parts must be integers, got {parts!r}")
        try:
            date(self.year, self.month, self.day)
        except ValueError as exc:
            raise InvalidRangeError(
                f"Invalid calendar date {self.year:04d}-{self.month:02d}-{self.day:02d}"
            ) from exc

    @classmethod
    def parse(cls, value: str) -> 'CalendarDate':
        """
        Parse the wire format YYYY-MM-DD

        Anything carrying a time of day or a zone offset is rejected.
        """
        if not isinstance(value, str):
            raise InvalidRangeError(f"Expected a YYYY-MM-DD string, got {type(value).__name__}")
        match = _ISO_DATE.match(value.strip())
        if not match:
            raise InvalidRangeError(f"Date must be formatted as YYYY-MM-DD, got {value!r}")
        year, month, day = (int(part) for part in match.groups())
        return cls(year, month, day)

    @classmethod
    def from_date(cls, value: date) -> 'CalendarDate':
        """Wrap a plain date; datetimes must go through from_instant()"""
        if isinstance(value, datetime):
            raise TypeError("Use CalendarDate.from_instant() to convert a datetime")
        return cls(value.year, value.month, value.day)

    @classmethod
    def from_instant(cls, instant: datetime, tz: tzinfo) -> 'CalendarDate':
        """
        Normalize an instant to the calendar date intended in zone `tz`

        The instant must be timezone-aware. This is the single place where
        a point in time becomes a calendar date.
        """
        if instant.tzinfo is None or instant.utcoffset() is None:
            raise ValueError("Instant must be timezone-aware")
        return cls.from_date(instant.astimezone(tz).date())

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def add_days(self, days: int) -> 'CalendarDate':
        return CalendarDate.from_date(self.to_date() + timedelta(days=days))

    def days_until(self, other: 'CalendarDate') -> int:
        """Signed number of days from this date to `other`"""
        return (other.to_date() - self.to_date()).days

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def __str__(self):
        return self.isoformat()

    def __repr__(self):
        return f"CalendarDate({self.isoformat()})"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start (inclusive) to end (inclusive).
    A single-day rental has start == end.
    """
    start: CalendarDate
    end: CalendarDate

    def __post_init__(self):
        if not isinstance(self.start, CalendarDate) or not isinstance(self.end, CalendarDate):
            raise TypeError("DateRange bounds must be CalendarDate instances")
        if self.start > self.end:
            raise InvalidRangeError(f"Start date ({self.start}) must not be after end date ({self.end})")

    @classmethod
    def parse(cls, start: str, end: str) -> 'DateRange':
        return cls(CalendarDate.parse(start), CalendarDate.parse(end))

    def overlaps(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Both ends are inclusive, so ranges sharing a single day overlap.

        Examples:
            - [05-01, 05-03] overlaps with [05-03, 05-05] -> True
            - [05-01, 05-03] overlaps with [05-04, 05-05] -> False
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return self.start <= other.end and other.start <= self.end

    def contains(self, day: CalendarDate) -> bool:
        return self.start <= day <= self.end

    def days_inclusive(self) -> int:
        """Number of rental days, counting both ends"""
        return max(1, self.start.days_until(self.end) + 1)

    def dates(self) -> Iterator[CalendarDate]:
        """Iterate over every calendar date in the range"""
        for offset in range(self.days_inclusive()):
            yield self.start.add_days(offset)

    def __len__(self) -> int:
        return self.days_inclusive()

    def __str__(self):
        return f"{self.start}..{self.end}"

    def __repr__(self):
        return f"DateRange({self.start}, {self.end})"


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a non-negative amount quantized to two decimal places.
    Immutable and supports the arithmetic pricing needs.
    """
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        try:
            amount = Decimal(str(self.amount)).quantize(_CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid money amount: {self.amount!r}") from exc
        if amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        object.__setattr__(self, 'amount', amount)

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> 'Money':
        return cls(Decimal('0'), currency)

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int | Decimal) -> 'Money':
        """Multiply money by a whole or decimal factor"""
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by int or Decimal")
        return Money(self.amount * factor, self.currency)

    __rmul__ = __mul__

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"
