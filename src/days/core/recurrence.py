"""Pure recurrence logic - expanding repeat rules into a month window."""

import math
import re
from dataclasses import dataclass
from datetime import date

from dateutil.relativedelta import relativedelta

UNITS = ("y", "m", "w", "d")

# Matches the repeater cookie of a SCHEDULED/DEADLINE timestamp: <2024-03-15 Fri .+1w>
_REPEATER = re.compile(r"(?:SCHEDULED|DEADLINE): <[^>]*?\s(?:\.\+|\+\+|\+)(\d+)([ymwdh])>")


@dataclass(frozen=True)
class RepeatRule:
    """A quantity+unit repetition, e.g. 2w = every two weeks."""

    quantity: int
    unit: str

    def advance(self, anchor: date, steps: int) -> date:
        """The date `steps` repetitions after anchor."""
        amount = self.quantity * steps
        match self.unit:
            case "y":
                return anchor + relativedelta(years=amount)
            case "m":
                return anchor + relativedelta(months=amount)
            case "w":
                return anchor + relativedelta(weeks=amount)
            case _:
                return anchor + relativedelta(days=amount)

    def units_between(self, start: date, end: date) -> int:
        """Whole calendar units from start to end, truncated toward zero."""
        match self.unit:
            case "y":
                return relativedelta(end, start).years
            case "m":
                delta = relativedelta(end, start)
                return delta.years * 12 + delta.months
            case "w":
                return int((end - start).days / 7)
            case _:
                return (end - start).days

    def __str__(self) -> str:
        return f"{self.quantity}{self.unit}"


def parse_rule(text: str | None) -> RepeatRule | None:
    """Decompose '2w' into RepeatRule(2, 'w'). Returns None if malformed."""
    if not text:
        return None
    text = text.strip()
    quantity, unit = text[:-1], text[-1:]
    if unit not in UNITS or not quantity.isdigit():
        return None
    if int(quantity) <= 0:
        return None
    return RepeatRule(int(quantity), unit)


def parse_repeater(content: str) -> str | None:
    """Repeat rule of the first scheduled/deadline repeater in block content."""
    match = _REPEATER.search(content or "")
    if not match:
        return None
    return f"{match.group(1)}{match.group(2)}"


def expand(
    anchor: date,
    rule: RepeatRule | str | None,
    max_occurrences: float,
    end_date: date,
    window_start: date,
    window_end: date,
) -> list[date]:
    """
    Occurrences of a repeating date that matter for one month window.

    Pure function - no I/O. The anchor itself is not included.

    Fast-forwards to the last occurrence on or before the earlier of end_date
    and window_start, emits that occurrence, then walks forward one step at a
    time until window_end, max_occurrences or end_date is reached.

    Args:
        anchor: First occurrence (the property's date value)
        rule: Repeat rule or its text encoding
        max_occurrences: Repetitions allowed after the anchor (math.inf = no cap,
            negative values also mean no cap)
        end_date: Occurrences must fall strictly before this date
        window_start: First day of the window
        window_end: First day after the window

    Returns:
        Strictly increasing list of occurrence dates
    """
    if isinstance(rule, str) or rule is None:
        rule = parse_rule(rule)
    if rule is None:
        return []
    if max_occurrences < 0:
        max_occurrences = math.inf

    occurrences = []
    boundary = min(end_date, window_start)
    jumps = int(rule.units_between(anchor, boundary) / rule.quantity)

    steps = 0
    current = anchor
    if jumps > 0:
        steps = min(jumps, max_occurrences)
        if steps > 0:
            current = rule.advance(anchor, steps)
            # Emitted even when it lands before window_start.
            occurrences.append(current)

    count = max(jumps, 0)
    while current < window_end and count < max_occurrences and current < end_date:
        steps += 1
        count += 1
        current = rule.advance(anchor, steps)
        if window_start <= current < window_end and current < end_date:
            occurrences.append(current)

    return occurrences
