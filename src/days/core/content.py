"""Pure block-content text helpers - titles and scheduled timestamps."""

import re
from datetime import date, datetime, time

MARKERS = (
    "TODO", "DOING", "DONE", "LATER", "NOW", "WAITING", "WAIT",
    "CANCELED", "CANCELLED", "IN-PROGRESS", "STARTED",
)

_MARKER = re.compile(rf"^(?:{'|'.join(re.escape(m) for m in MARKERS)})\s+")
_PRIORITY = re.compile(r"^\[#[A-C]\]\s*")
_HEADING = re.compile(r"^#{1,6}\s+")
_PROPERTY_LINE = re.compile(r"^\s*[\w\-]+::(\s|$)")
_TIMESTAMP_LINE = re.compile(r"^\s*(SCHEDULED|DEADLINE): <")
_PAGE_REF = re.compile(r"\[\[([^\[\]]+)\]\]")
BLOCK_REF = re.compile(r"\(\(([0-9a-fA-F-]{36})\)\)")
_TIMESTAMP = re.compile(
    r"(SCHEDULED|DEADLINE): <(\d{4}-\d{2}-\d{2})(?: [A-Za-z]{2,3})?(?: (\d{1,2}:\d{2}))?[^>]*>"
)


def content_title(content: str) -> str:
    """Display text of a block: its first line without marker, priority or links.

    Block references are left in place; see DayAggregator for resolving them.
    """
    for line in (content or "").splitlines():
        if _PROPERTY_LINE.match(line) or _TIMESTAMP_LINE.match(line):
            continue
        text = line.strip()
        if not text:
            continue
        text = _HEADING.sub("", text)
        text = _MARKER.sub("", text)
        text = _PRIORITY.sub("", text)
        return _PAGE_REF.sub(r"\1", text).strip()
    return ""


def block_ref_ids(text: str) -> list[str]:
    """UUIDs of ((block references)) in order of appearance."""
    return BLOCK_REF.findall(text)


def parse_scheduled(content: str) -> tuple[datetime, bool] | None:
    """
    Start of the first SCHEDULED/DEADLINE timestamp in block content.

    Returns (start, all_day); start is naive local time. None if absent or
    malformed.
    """
    match = _TIMESTAMP.search(content or "")
    if not match:
        return None
    try:
        day = date.fromisoformat(match.group(2))
        if match.group(3):
            hour, minute = (int(p) for p in match.group(3).split(":"))
            return datetime.combine(day, time(hour, minute)), False
        return datetime.combine(day, time.min), True
    except ValueError:
        return None
