"""
Base Domain Classes

This module provides the foundational building blocks for Domain-Driven Design:
- ValueObject: Immutable objects compared by value
- EventRecorder: Mixin for aggregate roots that collect domain events
- DomainEvent: Events that represent something that happened
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, List
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


class EventRecorder:
    """
    Mixin for aggregate roots

    Aggregates are the consistency boundaries in DDD.
    They collect domain events that will be published after successful transaction.
    Works for Django models as well: the pending events live in the instance
    ``__dict__`` and are never persisted.
    """

    def add_event(self, event: 'DomainEvent'):
        """Add a domain event to be published"""
        self.__dict__.setdefault('_pending_events', []).append(event)

    def clear_events(self):
        """Clear all collected events (called after publishing)"""
        self.__dict__['_pending_events'] = []

    @property
    def events(self) -> List['DomainEvent']:
        """Get copy of collected events"""
        return list(self.__dict__.get('_pending_events', []))


@dataclass(kw_only=True)
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the domain.
    ``name`` is the stable logical event name consumed by other contexts.
    """
    name: ClassVar[str] = 'domain_event'

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: UUID | None = None

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.name,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id else None,
        }
