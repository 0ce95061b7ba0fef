"""Participant domain entity: a named respondent with one availability flag per week."""
import time
from typing import List, Optional
from uuid import uuid4


def new_participant_id() -> str:
    return uuid4().hex


class Participant:
    def __init__(self, id: str = "", name: str = "", availability: Optional[List[bool]] = None,
                 created_at: int = 0, protected: bool = False):
        self.id = id
        self.name = name
        self.availability = list(availability) if availability else []
        self.created_at = created_at
        self.protected = protected

    @classmethod
    def create(cls, name: str, week_count: int, protected: bool = False) -> "Participant":
        '''New participant with a fresh id and all-false availability.'''
        return cls(new_participant_id(), name, [False] * week_count, time.time_ns(), protected)

    def toggled(self, week_index: int) -> "Participant":
        '''Copy with the flag at week_index flipped.'''
        availability = list(self.availability)
        availability[week_index] = not availability[week_index]
        return Participant(self.id, self.name, availability, self.created_at, self.protected)

    def aligned(self, week_count: int) -> "Participant":
        '''Copy whose availability has exactly week_count flags (padded with False).'''
        availability = list(self.availability[:week_count])
        availability.extend([False] * (week_count - len(availability)))
        return Participant(self.id, self.name, availability, self.created_at, self.protected)

    def sort_key(self):
        return (self.created_at, self.id)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Participant):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __str__(self) -> str:
        marks = "".join("x" if flag else "." for flag in self.availability)
        return f"{self.name} [{marks}]"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        '''Creates a Participant from a dictionary. Ignores unknown keys.

        Older local layouts used small integer ids and protected the record with id 1;
        those are converted to string ids and the protected flag.
        '''
        d = dict(data) if isinstance(data, dict) else {}
        raw_id = d.get("id", "")
        protected = d.get("protected")
        if protected is None:
            protected = isinstance(raw_id, int) and raw_id == 1
        availability = d.get("availability") or []
        if isinstance(availability, dict):
            availability = [availability[k] for k in sorted(availability, key=lambda k: int(k) if str(k).isdigit() else 0)]
        try:
            created_at = int(d.get("created_at") or 0)
        except (TypeError, ValueError):
            created_at = 0
        return Participant(
            id=str(raw_id),
            name=str(d.get("name", "")),
            availability=[bool(flag) for flag in availability],
            created_at=created_at,
            protected=bool(protected),
        )

    def to_dict(self):
        '''Converts the Participant to a dictionary for JSON persistence.'''
        return {
            "id": self.id,
            "name": self.name,
            "availability": list(self.availability),
            "created_at": self.created_at,
            "protected": self.protected,
        }


def participants_from_value(value) -> List[Participant]:
    """Build participants from a stored list or an id -> record mapping.

    Mapping enumeration order is not meaningful, so mapped records are sorted by creation time.
    """
    if isinstance(value, dict):
        records = [Participant.from_dict(v) for v in value.values() if isinstance(v, dict)]
        return sorted(records, key=Participant.sort_key)
    if isinstance(value, list):
        return [Participant.from_dict(v) for v in value if isinstance(v, dict)]
    return []
