"""Functional core - pure business logic with no I/O."""

from .dates import parse_date, format_date, day_key, from_day_key, month_window, fill_window
from .recurrence import RepeatRule, parse_rule, parse_repeater, expand
from .properties import PropertySlot, active_slots, FAR_FUTURE, MAX_SLOTS
from .context import AggregationContext
from .daymap import Annotation, DayEntry, DayMap
from .entries import Entry
from .targets import (
    QueryTarget,
    DynamicTarget,
    CustomQueryTarget,
    NamedTarget,
    EmptyTarget,
    parse_target,
)
from .calendar import SyncEvent

__all__ = [
    # Dates
    "parse_date",
    "format_date",
    "day_key",
    "from_day_key",
    "month_window",
    "fill_window",
    # Recurrence
    "RepeatRule",
    "parse_rule",
    "parse_repeater",
    "expand",
    # Properties
    "PropertySlot",
    "active_slots",
    "FAR_FUTURE",
    "MAX_SLOTS",
    "AggregationContext",
    # Day map
    "Annotation",
    "DayEntry",
    "DayMap",
    # Entries and targets
    "Entry",
    "QueryTarget",
    "DynamicTarget",
    "CustomQueryTarget",
    "NamedTarget",
    "EmptyTarget",
    "parse_target",
    # Calendar sync
    "SyncEvent",
]
