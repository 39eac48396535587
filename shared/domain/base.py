"""
Domain Building Blocks

Base classes for the booking engine's domain model:
- Entity: identity-compared record (UUID id plus timestamps)
- ValueObject: frozen, compared by value (CalendarDate, DateRange, Money)
- Aggregate: entity that buffers the events its transitions raise
- DomainEvent: envelope shared by the reservation events
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from uuid import UUID, uuid4


@dataclass(kw_only=True, eq=False)
class Entity(ABC):
    """
    Identity-compared record

    Subclasses must be declared with eq=False, otherwise the dataclass
    machinery replaces __eq__ with field-by-field comparison.
    """
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def touch(self):
        self.updated_at = datetime.now()


@dataclass(frozen=True)
class ValueObject(ABC):
    pass


@dataclass(kw_only=True, eq=False)
class Aggregate(Entity):
    """
    Entity that records the events raised by its state changes

    Events stay buffered on the aggregate until a unit of work collects
    them; they are published only once the surrounding transaction commits.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def clear_events(self):
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Copy of the buffered events, oldest first"""
        return self._events.copy()


@dataclass(kw_only=True)
class DomainEvent:
    """
    Something that happened to an aggregate

    Subclasses add their payload as positional fields.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: UUID | None = None

    def to_dict(self) -> dict:
        """Envelope fields as plain strings, as written to the audit log"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id else None,
        }
