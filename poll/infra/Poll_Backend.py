"""Persistence backends for the availability board.

A backend hides where weeks and participants live. The board subscribes once
(initial values arrive through the same callbacks as later pushes) and then
issues one write per user action.

  LocalBackend  -> two keys in a local key/value store, read once, no pushes
  RemoteBackend -> 'weeks' and 'participants/<id>' in a shared document store,
                   with push updates to every subscriber (originator included)
"""
from __future__ import annotations
import json
import logging
from threading import Lock
from typing import Any, Callable, List, Optional

from poll.domain.Participant import Participant
from poll.domain.Week import Week, default_weeks
from poll.infra.Document_Store import DocumentStore, Subscription, join_path
from poll.infra.Local_Storage import LocalStorage
from poll.infra.errors import PersistenceError
from poll.utilities.constants import (
    WEEKS_KEY, PARTICIPANTS_KEY, WEEKS_PATH, PARTICIPANTS_PATH, DEFAULT_PARTICIPANT_NAME
)

logger = logging.getLogger(__name__)

ValueCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class PollBackend:
    name = "base"

    def subscribe(self, on_weeks: ValueCallback, on_participants: ValueCallback,
                  on_error: ErrorCallback) -> Subscription:
        raise NotImplementedError

    def default_participants(self, week_count: int) -> List[Participant]:
        return []

    def save_weeks(self, weeks: List[Week]) -> None:
        raise NotImplementedError

    def save_participant(self, participant: Participant) -> None:
        raise NotImplementedError

    def remove_participant(self, participant_id: str) -> None:
        raise NotImplementedError

    def clear(self, weeks: List[Week], participants: List[Participant]) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class LocalBackend(PollBackend):
    """Variant A: whole collections serialized under two keys, rewritten on every change."""

    name = "local"

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        # Guards read-modify-write of the participants key
        self._lock = Lock()

    def _read(self, key: str) -> Optional[list]:
        raw = self.storage.get_item(key)
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Stored value for {key} is not valid JSON: {e}") from e
        return value if isinstance(value, list) else None

    def _write(self, key: str, records: list) -> None:
        self.storage.set_item(key, json.dumps(records, ensure_ascii=False))

    def default_participants(self, week_count: int) -> List[Participant]:
        return [Participant.create(DEFAULT_PARTICIPANT_NAME, week_count, protected=True)]

    def subscribe(self, on_weeks: ValueCallback, on_participants: ValueCallback,
                  on_error: ErrorCallback) -> Subscription:
        try:
            weeks = self._read(WEEKS_KEY)
            participants = self._read(PARTICIPANTS_KEY)
        except PersistenceError as e:
            on_error(e)
            return Subscription()
        # First run: seed and store the defaults right away
        try:
            if weeks is None:
                weeks = [w.to_dict() for w in default_weeks()]
                self._write(WEEKS_KEY, weeks)
            if participants is None:
                participants = [p.to_dict() for p in self.default_participants(len(weeks))]
                self._write(PARTICIPANTS_KEY, participants)
        except PersistenceError as e:
            on_error(e)
        on_weeks(weeks)
        on_participants(participants)
        return Subscription()

    def save_weeks(self, weeks: List[Week]) -> None:
        self._write(WEEKS_KEY, [w.to_dict() for w in weeks])

    def save_participant(self, participant: Participant) -> None:
        record = participant.to_dict()
        with self._lock:
            records = self._read(PARTICIPANTS_KEY) or []
            for i, existing in enumerate(records):
                if isinstance(existing, dict) and str(existing.get("id")) == participant.id:
                    records[i] = record
                    break
            else:
                records.append(record)
            self._write(PARTICIPANTS_KEY, records)

    def remove_participant(self, participant_id: str) -> None:
        with self._lock:
            records = self._read(PARTICIPANTS_KEY) or []
            kept = [r for r in records if not (isinstance(r, dict) and str(r.get("id")) == participant_id)]
            self._write(PARTICIPANTS_KEY, kept)

    def clear(self, weeks: List[Week], participants: List[Participant]) -> None:
        with self._lock:
            self.storage.remove_item(WEEKS_KEY)
            self.storage.remove_item(PARTICIPANTS_KEY)
            self.save_weeks(weeks)
            self._write(PARTICIPANTS_KEY, [p.to_dict() for p in participants])
        logger.info("Local poll data cleared")


class RemoteBackend(PollBackend):
    """Variant B: weeks replaced wholesale, one document per participant."""

    name = "remote"

    def __init__(self, store: DocumentStore):
        self.store = store

    def subscribe(self, on_weeks: ValueCallback, on_participants: ValueCallback,
                  on_error: ErrorCallback) -> Subscription:
        weeks_sub = self.store.subscribe(WEEKS_PATH, on_weeks, on_error)
        try:
            participants_sub = self.store.subscribe(PARTICIPANTS_PATH, on_participants, on_error)
        except Exception:
            weeks_sub.cancel()
            raise
        return Subscription.combine(weeks_sub, participants_sub)

    def save_weeks(self, weeks: List[Week]) -> None:
        self.store.set(WEEKS_PATH, [w.to_dict() for w in weeks])

    def save_participant(self, participant: Participant) -> None:
        self.store.set(join_path(PARTICIPANTS_PATH, participant.id), participant.to_dict())

    def remove_participant(self, participant_id: str) -> None:
        self.store.remove(join_path(PARTICIPANTS_PATH, participant_id))

    def clear(self, weeks: List[Week], participants: List[Participant]) -> None:
        self.save_weeks(weeks)
        self.store.remove(PARTICIPANTS_PATH)
        for participant in participants:
            self.save_participant(participant)
        logger.info("Shared poll data cleared")

    def close(self) -> None:
        self.store.close()
