"""Pure calendar-sync domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

EVENT_DURATION = timedelta(hours=1)


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix; naive means local."""
    utc = dt.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class SyncEvent:
    """A scheduled or deadline block as an external calendar event."""

    title: str
    start: datetime
    end: datetime
    all_day: bool

    @classmethod
    def from_timestamp(cls, title: str, start: datetime, all_day: bool) -> "SyncEvent":
        """Timed events last an hour; all-day events run to the next midnight."""
        end = start + (timedelta(days=1) if all_day else EVENT_DURATION)
        return cls(title=title, start=start, end=end, all_day=all_day)

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "startTime": to_iso(self.start),
            "endTime": to_iso(self.end),
            "allDay": self.all_day,
        }


def sort_events_by_start(events: dict[str, SyncEvent]) -> dict[str, SyncEvent]:
    """Order an id -> event mapping by start time."""
    return dict(sorted(events.items(), key=lambda item: item[1].start))
