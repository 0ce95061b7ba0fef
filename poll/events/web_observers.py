"""Web-facing observers for board events.

This module subscribes to the GLOBAL_EVENT_BUS for:
  - poll.weeks_changed
  - poll.participants_changed
  - poll.error

and stores a lightweight in-memory ring buffer of recent events that the
browser polls (GET /api/events?since=<cursor>) to refresh the grid when
another participant, or a backend push, changes the state.

Design:
  * Each event stored with an auto-increment integer id (cursor) so clients
    can request only newer events (since=<last_id_seen>).
  * Thread-safety ensured with a simple Lock; pushes from the remote store
    arrive on stream threads while requests run on the worker pool.
  * A MAX_EVENTS cap prevents unbounded memory growth.
"""
from __future__ import annotations
from typing import List, Dict, Any
from threading import Lock
from datetime import datetime, timezone
import logging

from .Event_Bus import (
    GLOBAL_EVENT_BUS, POLL_WEEKS_CHANGED, POLL_PARTICIPANTS_CHANGED, POLL_ERROR
)

logger = logging.getLogger(__name__)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 300  # keep a few hundred recent events
_started = False
_EVENT_NAMES = (POLL_WEEKS_CHANGED, POLL_PARTICIPANTS_CHANGED, POLL_ERROR)


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        }
        # Only small summaries travel to the browser; it reloads the grid itself
        if isinstance(payload, dict):
            if 'message' in payload:
                evt['message'] = payload['message']
            if 'count' in payload:
                evt['count'] = payload['count']
            if 'weeks' in payload:
                evt['labels'] = [w.get('label', '') for w in payload['weeks']]
        _events.append(evt)
        _next_id += 1
        # Trim buffer
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    for name in _EVENT_NAMES:
        GLOBAL_EVENT_BUS.subscribe(name, _record)
    _started = True
    logger.debug("Web observers subscribed to %s", ", ".join(_EVENT_NAMES))


def stop():
    """Unsubscribe observers; buffered events are kept."""
    global _started
    for name in _EVENT_NAMES:
        GLOBAL_EVENT_BUS.unsubscribe(name, _record)
    _started = False


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive).

    If since is None, returns the last N (up to MAX_EVENTS) events.
    Response includes next_cursor (largest id) so client can poll with since=next_cursor.
    """
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'stop', 'get_events']
