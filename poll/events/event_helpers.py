"""Event helper utilities.

This module provides helper functions for publishing board events
on an event bus (the global one unless another is given).

Quick import:
    from poll.events.event_helpers import (
        publish_weeks_changed, publish_participants_changed, publish_error,
        POLL_WEEKS_CHANGED, POLL_PARTICIPANTS_CHANGED, POLL_ERROR
    )

"""
from __future__ import annotations
from typing import Iterable, Any, Optional
from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS,
    POLL_WEEKS_CHANGED, POLL_PARTICIPANTS_CHANGED, POLL_ERROR
)

__all__ = [
    'publish_weeks_changed', 'publish_participants_changed', 'publish_error',
    'POLL_WEEKS_CHANGED', 'POLL_PARTICIPANTS_CHANGED', 'POLL_ERROR'
]


def _bus(bus: Optional[EventBus]) -> EventBus:
    return bus if bus is not None else GLOBAL_EVENT_BUS


def _as_dicts(items: Iterable[Any]) -> list:
    return [item.to_dict() if hasattr(item, 'to_dict') else dict(item) for item in items]


def publish_weeks_changed(weeks: Iterable[Any], bus: Optional[EventBus] = None):
    """Publish a poll.weeks_changed event with the full weeks sequence."""
    _bus(bus).publish(POLL_WEEKS_CHANGED, {'weeks': _as_dicts(weeks)})


def publish_participants_changed(participants: Iterable[Any], bus: Optional[EventBus] = None):
    """Publish a poll.participants_changed event.

    Payload structure:
        {
          'count': <int>,
          'participants': [ { id, name, availability, created_at, protected }, ... ]
        }
    """
    records = _as_dicts(participants)
    _bus(bus).publish(POLL_PARTICIPANTS_CHANGED, {
        'count': len(records),
        'participants': records
    })


def publish_error(message: str, bus: Optional[EventBus] = None):
    """Publish a poll.error event carrying the banner message."""
    _bus(bus).publish(POLL_ERROR, {'message': message})
