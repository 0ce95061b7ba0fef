"""Week domain entity: a labeled time slot participants mark availability against."""
from typing import List

from poll.utilities.constants import DEFAULT_WEEKS


class Week:
    def __init__(self, id: int = 0, label: str = ""):
        self.id = id
        self.label = label

    def with_label(self, label: str) -> "Week":
        return Week(self.id, label)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Week):
            return NotImplemented
        return self.id == other.id and self.label == other.label

    def __str__(self) -> str:
        return f"Week {self.id}: {self.label}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        '''Creates a Week from a dictionary. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        try:
            week_id = int(d.get("id", 0))
        except (TypeError, ValueError):
            week_id = 0
        label = d.get("label", "")
        return Week(week_id, label if isinstance(label, str) else str(label))

    def to_dict(self):
        return {"id": self.id, "label": self.label}


def default_weeks() -> List[Week]:
    """Fresh copy of the four seeded weeks."""
    return [Week(week_id, label) for week_id, label in DEFAULT_WEEKS]


def weeks_from_value(value) -> List[Week]:
    """Build weeks from a stored value (list, or a dict keyed by position)."""
    if isinstance(value, dict):
        value = [value[k] for k in sorted(value, key=lambda k: int(k) if str(k).isdigit() else 0)]
    if not isinstance(value, list):
        return []
    return [Week.from_dict(entry) for entry in value if isinstance(entry, dict)]
