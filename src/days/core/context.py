"""Immutable settings handed to every aggregation call."""

from dataclasses import dataclass, field
from datetime import date

from .dates import format_date
from .properties import DEFAULT_COLOR, PropertySlot, active_slots

DEFAULT_DATE_FORMAT = "MMM do, yyyy"
DEFAULT_WEEK_PAGE_FORMAT = "yyyy-'W'w"


@dataclass(frozen=True)
class AggregationContext:
    """Date format, week numbering and property slots for one settings revision."""

    date_format: str = DEFAULT_DATE_FORMAT
    week_page_format: str = DEFAULT_WEEK_PAGE_FORMAT
    week_start: int = 0
    first_week_contains_date: int = 1
    display_scheduled_and_deadline: bool = True
    scheduled_color: str = DEFAULT_COLOR
    deadline_color: str = DEFAULT_COLOR
    slots: tuple[PropertySlot, ...] = field(default_factory=tuple)

    def active_slots(self) -> list[PropertySlot]:
        return active_slots(self.slots)

    def journal_page_name(self, d: date) -> str:
        """Title of the journal page for d."""
        return format_date(d, self.date_format, self.week_start, self.first_week_contains_date)

    def week_page_name(self, d: date) -> str | None:
        """Title of the week page containing d, or None when week pages are disabled."""
        if not self.week_page_format:
            return None
        return format_date(d, self.week_page_format, self.week_start, self.first_week_contains_date)
