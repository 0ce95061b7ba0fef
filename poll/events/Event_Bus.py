"""Simple Event Bus / Observer implementation for board changes.

Event names used so far:
  poll.weeks_changed -> payload {"weeks": [ {id, label}, ... ]}
  poll.participants_changed -> payload {"participants": [ {id, name, availability, ...}, ... ]}
  poll.error -> payload {"message": str}

Subscribers are callables taking (event_name, payload). The in-memory document store
reuses the bus with document paths as event names.
"""
from __future__ import annotations
from collections import defaultdict
from threading import Lock
from typing import Callable, Any, Dict, List
import logging

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
POLL_WEEKS_CHANGED = "poll.weeks_changed"
POLL_PARTICIPANTS_CHANGED = "poll.participants_changed"
POLL_ERROR = "poll.error"


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)
		self._lock = Lock()

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		with self._lock:
			if callback not in self._subscribers[event_name]:
				self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		with self._lock:
			try:
				self._subscribers[event_name].remove(callback)
			except (ValueError, KeyError):
				pass
			if not self._subscribers.get(event_name):
				self._subscribers.pop(event_name, None)

	def event_names(self) -> List[str]:
		"""Names that currently have at least one subscriber."""
		with self._lock:
			return [name for name, callbacks in self._subscribers.items() if callbacks]

	def publish(self, event_name: str, payload: Any):
		with self._lock:
			callbacks = list(self._subscribers.get(event_name, []))
		for cb in callbacks:
			try:
				cb(event_name, payload)
			except Exception:
				logger.exception("Error delivering %s to %r", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()

__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS',
	'POLL_WEEKS_CHANGED', 'POLL_PARTICIPANTS_CHANGED', 'POLL_ERROR'
]
