"""Availability board: owns weeks and participants and mirrors every change to a backend."""
from __future__ import annotations
import logging
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Union

from poll.domain.Participant import Participant, participants_from_value
from poll.domain.Week import Week, default_weeks, weeks_from_value
from poll.events.Event_Bus import EventBus, GLOBAL_EVENT_BUS
from poll.events.event_helpers import (
    publish_weeks_changed, publish_participants_changed, publish_error
)
from poll.infra.Document_Store import Subscription
from poll.infra.Poll_Backend import PollBackend
from poll.infra.errors import PersistenceError
from poll.logic.summary import compute_week_totals, best_week_ids
from poll.utilities.constants import (
    CLEAR_CONFIRM_PROMPT, MSG_LOAD_FAILED, MSG_TOGGLE_FAILED, MSG_ADD_FAILED,
    MSG_REMOVE_FAILED, MSG_LABEL_FAILED, MSG_CLEAR_FAILED
)

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]


class NotFoundError(ValueError):
    """Raised when a participant or week id is unknown."""


class AvailabilityBoard:
    """Stateful poll grid bound to one persistence backend.

    Usage:
        with AvailabilityBoard(backend) as board:
            board.add_participant("Alex")
            board.toggle_availability(board.participants[-1].id, 2)

    Entering the context subscribes to the backend (initial values arrive through the
    same handlers as later pushes); leaving it cancels the subscription on every exit path.

    Writes are optimistic: local state changes under the lock, the lock is released, then
    the backend write runs on the caller's thread. Readers, other operations and pushes never
    wait for an outstanding write, and successive writes are not ordered. A failed write is
    logged and shown on the error banner; nothing is rolled back or retried. With a shared
    store the pushed value that follows a write replaces the local copy.
    """

    def __init__(self, backend: PollBackend, confirm: Optional[ConfirmCallback] = None,
                 bus: Optional[EventBus] = None):
        self._backend = backend
        self._confirm = confirm
        self._bus = bus if bus is not None else GLOBAL_EVENT_BUS
        self._lock = RLock()
        self._subscription: Optional[Subscription] = None
        self.weeks: List[Week] = default_weeks()
        self.participants: List[Participant] = []
        # Transient UI state
        self.new_participant_name = ""
        self.editing_week_id: Optional[int] = None
        self.editing_label = ""
        self.error: Optional[str] = None

    @property
    def backend(self) -> PollBackend:
        return self._backend

    @property
    def mounted(self) -> bool:
        return self._subscription is not None and self._subscription.active

    # --- Lifecycle ---------------------------------------------------------
    def mount(self) -> "AvailabilityBoard":
        if self.mounted:
            return self
        try:
            self._subscription = self._backend.subscribe(
                self._on_weeks, self._on_participants, self._on_load_error
            )
        except PersistenceError as e:
            self._on_load_error(e)
        return self

    def unmount(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.cancel()

    def __enter__(self):
        return self.mount()

    def __exit__(self, exc_type, exc, tb):
        self.unmount()
        return False

    # --- Backend handlers ----------------------------------------------------
    def _on_weeks(self, value: Any):
        with self._lock:
            self.weeks = weeks_from_value(value) or default_weeks()
            self.participants = self._aligned(self.participants)
            weeks = list(self.weeks)
        publish_weeks_changed(weeks, self._bus)

    def _on_participants(self, value: Any):
        with self._lock:
            if value is None:
                participants = self._backend.default_participants(len(self.weeks))
            else:
                participants = participants_from_value(value)
            self.participants = self._aligned(participants)
            current = list(self.participants)
        publish_participants_changed(current, self._bus)

    def _on_load_error(self, error: Exception):
        logger.error("Error loading poll data: %s", error)
        self._set_error(MSG_LOAD_FAILED)

    # --- Helpers -------------------------------------------------------------
    def _aligned(self, participants: List[Participant]) -> List[Participant]:
        count = len(self.weeks)
        return [p if len(p.availability) == count else p.aligned(count) for p in participants]

    def _set_error(self, message: str):
        with self._lock:
            self.error = message
        publish_error(message, self._bus)

    def _persist(self, write: Callable[[], None], message: str, action: str) -> bool:
        # Called without the board lock held
        try:
            write()
        except PersistenceError as e:
            logger.error("Failed to %s: %s", action, e)
            self._set_error(message)
            return False
        return True

    def _index_of(self, participant_id: str) -> int:
        for i, participant in enumerate(self.participants):
            if participant.id == participant_id:
                return i
        raise NotFoundError(f"Participant '{participant_id}' not found.")

    def _find_week(self, week_id: int) -> Week:
        for week in self.weeks:
            if week.id == week_id:
                return week
        raise NotFoundError(f"Week '{week_id}' not found.")

    def get_participant(self, participant_id: str) -> Participant:
        with self._lock:
            return self.participants[self._index_of(participant_id)]

    # --- Operations ----------------------------------------------------------
    def toggle_availability(self, participant_id: str, week_index: int) -> Participant:
        '''Flip one availability flag and persist the participant record.'''
        with self._lock:
            if isinstance(week_index, bool) or not isinstance(week_index, int) \
                    or not 0 <= week_index < len(self.weeks):
                raise ValueError(f"Week index out of range: {week_index}")
            i = self._index_of(participant_id)
            updated = self.participants[i].aligned(len(self.weeks)).toggled(week_index)
            self.participants[i] = updated
            current = list(self.participants)
        publish_participants_changed(current, self._bus)
        self._persist(lambda: self._backend.save_participant(updated),
                      MSG_TOGGLE_FAILED, "update availability")
        return updated

    def add_participant(self, name: Optional[str] = None) -> Optional[Participant]:
        '''
        Adds a participant with all-false availability and persists it.
        Uses (and on success clears) new_participant_name when no name is given;
        a blank name is a no-op.
        '''
        from_input = name is None
        with self._lock:
            raw = self.new_participant_name if from_input else name
            trimmed = (raw or "").strip()
            if not trimmed:
                return None
            participant = Participant.create(trimmed, len(self.weeks))
            self.participants.append(participant)
            current = list(self.participants)
        publish_participants_changed(current, self._bus)
        saved = self._persist(lambda: self._backend.save_participant(participant),
                              MSG_ADD_FAILED, "add participant")
        if saved and from_input:
            with self._lock:
                if self.new_participant_name == raw:
                    self.new_participant_name = ""
        logger.info("Participant added: %s", participant.name)
        return participant

    def remove_participant(self, participant_id: str) -> Participant:
        '''Deletes a participant locally and in the backend. Protected participants stay.'''
        with self._lock:
            i = self._index_of(participant_id)
            if self.participants[i].protected:
                raise ValueError(f"Participant '{self.participants[i].name}' cannot be removed.")
            removed = self.participants.pop(i)
            current = list(self.participants)
        publish_participants_changed(current, self._bus)
        self._persist(lambda: self._backend.remove_participant(participant_id),
                      MSG_REMOVE_FAILED, "remove participant")
        logger.info("Participant removed: %s", removed.name)
        return removed

    def start_editing_week(self, week: Union[Week, int]) -> None:
        '''Enter edit mode for one week label; any other edit in progress is replaced.'''
        with self._lock:
            target = self._find_week(week.id if isinstance(week, Week) else week)
            self.editing_week_id = target.id
            self.editing_label = target.label

    def cancel_editing_week(self) -> None:
        with self._lock:
            self.editing_week_id = None
            self.editing_label = ""

    def save_week_label(self, label: Optional[str] = None) -> bool:
        """Leave edit mode, storing the edited label.

        A blank label discards the edit. Otherwise the whole weeks sequence is persisted.
        Returns True when a label was changed.
        """
        with self._lock:
            if self.editing_week_id is None:
                return False
            if label is not None:
                self.editing_label = label
            week_id, edited = self.editing_week_id, self.editing_label
            self.editing_week_id = None
            self.editing_label = ""
        return self.rename_week(week_id, edited)

    def rename_week(self, week_id: int, label: str) -> bool:
        '''Replace one week label without touching the edit slot. A blank label changes nothing.'''
        trimmed = (label or "").strip()
        with self._lock:
            self._find_week(week_id)
            if not trimmed:
                return False
            self.weeks = [w.with_label(trimmed) if w.id == week_id else w for w in self.weeks]
            weeks = list(self.weeks)
        publish_weeks_changed(weeks, self._bus)
        self._persist(lambda: self._backend.save_weeks(weeks), MSG_LABEL_FAILED, "update week label")
        return True

    def clear_all_data(self, confirm: Optional[ConfirmCallback] = None) -> bool:
        """Reset weeks and participants to their defaults after an explicit confirmation.

        Without a confirmation callback the request is declined. Returns True when data was reset.
        """
        confirm = confirm or self._confirm
        if confirm is None or not confirm(CLEAR_CONFIRM_PROMPT):
            logger.debug("Clear all data declined")
            return False
        weeks = default_weeks()
        participants = self._backend.default_participants(len(weeks))
        with self._lock:
            self.weeks = list(weeks)
            self.participants = list(participants)
            self.editing_week_id = None
            self.editing_label = ""
        publish_weeks_changed(weeks, self._bus)
        publish_participants_changed(participants, self._bus)
        self._persist(lambda: self._backend.clear(weeks, participants), MSG_CLEAR_FAILED, "clear data")
        logger.info("All poll data cleared")
        return True

    # --- Views ---------------------------------------------------------------
    def rows(self) -> List[Dict[str, Any]]:
        """One row per participant: the record, one cell per week and whether it can be removed."""
        with self._lock:
            weeks = list(self.weeks)
            participants = list(self.participants)
        return [
            {
                'participant': p,
                'cells': [
                    {'index': i, 'week_id': w.id,
                     'available': i < len(p.availability) and p.availability[i]}
                    for i, w in enumerate(weeks)
                ],
                'removable': not p.protected,
            }
            for p in participants
        ]

    def week_totals(self) -> List[Dict[str, Any]]:
        with self._lock:
            return compute_week_totals(self.weeks, self.participants)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            totals = compute_week_totals(self.weeks, self.participants)
            return {
                'backend': self._backend.name,
                'weeks': [w.to_dict() for w in self.weeks],
                'participants': [p.to_dict() for p in self.participants],
                'totals': totals,
                'best_week_ids': best_week_ids(totals),
                'editing_week_id': self.editing_week_id,
                'editing_label': self.editing_label,
                'new_participant_name': self.new_participant_name,
                'error': self.error,
            }
