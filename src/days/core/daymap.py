"""Day map - merged annotations keyed by calendar day.

Merge policy:
- linked_entry_id: first writer wins
- is_current, is_contentful, has_task: once true, stay true
- annotations: appended in discovery order, never deduplicated
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterator

from .dates import day_key, from_day_key


@dataclass(frozen=True)
class Annotation:
    """A highlighted property on a day."""

    display_name: str
    color: str
    jump_target: str

    def to_dict(self) -> dict:
        return {
            "displayName": self.display_name,
            "color": self.color,
            "jumpTarget": self.jump_target,
        }


@dataclass
class DayEntry:
    """Everything known about one calendar day."""

    linked_entry_id: str | None = None
    is_current: bool = False
    is_contentful: bool = False
    has_task: bool = False
    annotations: list[Annotation] = field(default_factory=list)

    def merge(self, other: "DayEntry") -> None:
        """Fold another entry for the same day into this one."""
        if self.linked_entry_id is None:
            self.linked_entry_id = other.linked_entry_id
        self.is_current = self.is_current or other.is_current
        self.is_contentful = self.is_contentful or other.is_contentful
        self.has_task = self.has_task or other.has_task
        self.annotations.extend(other.annotations)

    def to_dict(self) -> dict:
        data: dict = {}
        if self.linked_entry_id is not None:
            data["linkedEntryId"] = self.linked_entry_id
        if self.is_current:
            data["isCurrent"] = True
        if self.is_contentful:
            data["isContentful"] = True
        if self.has_task:
            data["hasTask"] = True
        if self.annotations:
            data["annotations"] = [a.to_dict() for a in self.annotations]
        return data


class DayMap:
    """Day entries keyed by day key (local-midnight epoch milliseconds)."""

    def __init__(self):
        self._days: dict[int, DayEntry] = {}

    def __len__(self) -> int:
        return len(self._days)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, date):
            key = day_key(key)
        return key in self._days

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._days))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DayMap):
            return NotImplemented
        return self._days == other._days

    def __repr__(self) -> str:
        return f"DayMap({len(self)} days)"

    def get(self, key: int) -> DayEntry | None:
        return self._days.get(key)

    def get_day(self, d: date) -> DayEntry | None:
        return self._days.get(day_key(d))

    def items(self) -> list[tuple[int, DayEntry]]:
        """(day key, entry) pairs ordered by day."""
        return [(key, self._days[key]) for key in self]

    def dates(self) -> list[date]:
        return [from_day_key(key) for key in self]

    def day(self, d: date) -> DayEntry:
        """Entry for d, created empty if missing."""
        return self._days.setdefault(day_key(d), DayEntry())

    def link(self, d: date, entry_id: str) -> None:
        entry = self.day(d)
        if entry.linked_entry_id is None:
            entry.linked_entry_id = entry_id

    def mark_current(self, d: date) -> None:
        self.day(d).is_current = True

    def mark_contentful(self, d: date) -> None:
        self.day(d).is_contentful = True

    def mark_task(self, d: date) -> None:
        self.day(d).has_task = True

    def annotate(self, d: date, annotation: Annotation) -> None:
        self.day(d).annotations.append(annotation)

    def merge(self, other: "DayMap") -> "DayMap":
        """Fold another map into this one under the merge policy. Returns self."""
        for key, entry in other._days.items():
            target = self._days.setdefault(key, DayEntry())
            target.merge(entry)
        return self

    def filter(self, predicate) -> "DayMap":
        """New map with only the days for which predicate(date) is true."""
        result = DayMap()
        for key, entry in self._days.items():
            if predicate(from_day_key(key)):
                result._days[key] = replace(entry, annotations=list(entry.annotations))
        return result

    def to_dict(self) -> dict[str, dict]:
        """JSON-friendly view keyed by ISO date."""
        return {from_day_key(key).isoformat(): entry.to_dict() for key, entry in self.items()}
