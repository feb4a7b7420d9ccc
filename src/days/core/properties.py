"""Date property slots - which page/block properties hold dates, and how they repeat."""

import math
from dataclasses import dataclass
from datetime import date

MAX_SLOTS = 15
DEFAULT_COLOR = "#ffa500"
# Effective "no end" for repeating dates
FAR_FUTURE = date(3000, 12, 31)


@dataclass(frozen=True)
class PropertySlot:
    """One configured date property."""

    name: str = ""
    color: str = DEFAULT_COLOR
    repeat: str | None = None
    repeat_count: int = -1
    repeat_end_at: date | None = None

    @property
    def is_active(self) -> bool:
        return bool(self.name.strip())

    @property
    def max_occurrences(self) -> float:
        """Repetitions allowed after the first date; -1 means endless."""
        return math.inf if self.repeat_count < 0 else self.repeat_count

    @property
    def end_date(self) -> date:
        return self.repeat_end_at or FAR_FUTURE


def active_slots(slots: list[PropertySlot] | tuple[PropertySlot, ...]) -> list[PropertySlot]:
    """Configured slots that name a property, in slot order."""
    return [slot for slot in slots[:MAX_SLOTS] if slot.is_active]
