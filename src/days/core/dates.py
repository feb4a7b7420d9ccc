"""Pure date logic - parsing and formatting journal date patterns, day keys.

Patterns use the Unicode/date-fns token set that journal graphs use for page
titles ("MMM do, yyyy", "yyyy-MM-dd", "EEE, dd.MM.yyyy", ...). Names are
English regardless of UI language.
"""

import re
from datetime import date, datetime, time, timedelta
from functools import lru_cache

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

FILL_PADDING_DAYS = 6

_LINK_WRAPPER = re.compile(r"^\[\[(.*)\]\]\s*$")
_TOKEN = re.compile(r"'(?:[^']|'')*'|[dwM]o|([A-Za-z])\1*")


def strip_link_brackets(value: str) -> str:
    """Remove a surrounding [[...]] page-link wrapper, if any."""
    return _LINK_WRAPPER.sub(r"\1", value)


def _tokenize(pattern: str) -> list[tuple[str, str]]:
    """Split a pattern into ("token", "yyyy") and ("literal", "-") parts."""
    parts: list[tuple[str, str]] = []
    pos = 0
    for m in _TOKEN.finditer(pattern):
        if m.start() > pos:
            parts.append(("literal", pattern[pos:m.start()]))
        text = m.group(0)
        if text.startswith("'"):
            # a lone '' is an escaped quote
            inner = text[1:-1] if len(text) > 2 else "'"
            parts.append(("literal", inner.replace("''", "'")))
        else:
            parts.append(("token", text))
        pos = m.end()
    if pos < len(pattern):
        parts.append(("literal", pattern[pos:]))
    return parts


def _names_alternation(names: tuple[str, ...], length: int | None = None) -> str:
    items = [n[:length] if length else n for n in names]
    return "|".join(sorted(set(items), key=len, reverse=True))


# group name, regex
_PARSE_TOKENS = {
    "yyyy": ("year", r"\d{4}"),
    "yyy": ("year", r"\d{1,4}"),
    "yy": ("year2", r"\d{2}"),
    "y": ("year", r"\d{1,4}"),
    "MMMM": ("month_name", _names_alternation(MONTH_NAMES)),
    "MMM": ("month_abbr", _names_alternation(MONTH_NAMES, 3)),
    "MM": ("month", r"\d{1,2}"),
    "M": ("month", r"\d{1,2}"),
    "Mo": ("month", r"\d{1,2}(?:st|nd|rd|th)"),
    "dd": ("day", r"\d{1,2}"),
    "d": ("day", r"\d{1,2}"),
    "do": ("day", r"\d{1,2}(?:st|nd|rd|th)"),
    "EEEE": (None, _names_alternation(WEEKDAY_NAMES)),
    "EEE": (None, _names_alternation(WEEKDAY_NAMES, 3)),
    "EE": (None, _names_alternation(WEEKDAY_NAMES, 3)),
    "E": (None, _names_alternation(WEEKDAY_NAMES, 3)),
}


@lru_cache(maxsize=64)
def _compile_pattern(pattern: str) -> re.Pattern | None:
    """Translate a date pattern into a regex with named groups.

    Returns None for patterns with tokens that cannot identify a calendar day.
    """
    regex = []
    seen: set[str] = set()
    for kind, text in _tokenize(pattern):
        if kind == "literal":
            regex.append(re.escape(text))
            continue
        if text not in _PARSE_TOKENS:
            return None
        group, expr = _PARSE_TOKENS[text]
        if group is None:
            regex.append(f"(?:{expr})")
        elif group in seen:
            regex.append(f"(?:{expr})")
        else:
            seen.add(group)
            regex.append(f"(?P<{group}>{expr})")
    has_year = seen & {"year", "year2"}
    has_month = seen & {"month", "month_name", "month_abbr"}
    if not (has_year and has_month and "day" in seen):
        return None
    return re.compile("".join(regex), re.IGNORECASE)


def _month_from_name(name: str) -> int:
    lowered = name.lower()
    for i, full in enumerate(MONTH_NAMES, start=1):
        if full.lower().startswith(lowered[:3]):
            return i
    raise ValueError(f"Unknown month name: {name}")


def _expand_two_digit_year(value: int, today: date | None = None) -> int:
    """Pick the century that puts the year closest to today."""
    today = today or date.today()
    century = today.year - today.year % 100
    candidates = [century - 100 + value, century + value, century + 100 + value]
    return min(candidates, key=lambda y: abs(y - today.year))


def parse_date(raw: str, fmt: str) -> date | None:
    """Parse a textual date value against a journal date pattern.

    The value may be wrapped in [[...]]. Returns None when the text does not
    match the pattern, names an impossible day (e.g. the 32nd) or a day
    with no epoch timestamp (e.g. 0001-01-01).
    """
    if not raw or not fmt:
        return None
    compiled = _compile_pattern(fmt)
    if compiled is None:
        return None
    match = compiled.fullmatch(strip_link_brackets(raw.strip()).strip())
    if not match:
        return None

    parts = match.groupdict()
    try:
        if parts.get("year") is not None:
            year = int(parts["year"])
        else:
            year = _expand_two_digit_year(int(parts["year2"]))
        if parts.get("month") is not None:
            month = int(parts["month"].rstrip("stndrh"))
        elif parts.get("month_name") is not None:
            month = _month_from_name(parts["month_name"])
        else:
            month = _month_from_name(parts["month_abbr"])
        day = int(parts["day"].rstrip("stndrh"))
        parsed = date(year, month, day)
    except ValueError:
        return None
    return parsed if has_day_key(parsed) else None


def ordinal(n: int) -> str:
    """1 -> '1st', 12 -> '12th', 22 -> '22nd'."""
    if 11 <= n % 100 <= 13:
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def start_of_week(d: date, week_start: int = 0) -> date:
    """First day of d's week. week_start: 0 = Sunday ... 6 = Saturday."""
    js_weekday = (d.weekday() + 1) % 7
    return d - timedelta(days=(js_weekday - week_start) % 7)


def week_numbering_year(d: date, week_start: int = 0, first_week_contains_date: int = 1) -> int:
    """Local week-numbering year: the year whose week 1 contains d's week."""
    year = d.year
    next_first = start_of_week(date(year + 1, 1, first_week_contains_date), week_start)
    this_first = start_of_week(date(year, 1, first_week_contains_date), week_start)
    if d >= next_first:
        return year + 1
    if d >= this_first:
        return year
    return year - 1


def week_number(d: date, week_start: int = 0, first_week_contains_date: int = 1) -> int:
    """Local week number, counting weeks from the week containing Jan <first_week_contains_date>."""
    week_year = week_numbering_year(d, week_start, first_week_contains_date)
    first = start_of_week(date(week_year, 1, first_week_contains_date), week_start)
    return round((start_of_week(d, week_start) - first).days / 7) + 1


def format_date(
    d: date,
    fmt: str,
    week_start: int = 0,
    first_week_contains_date: int = 1,
) -> str:
    """Render a date with a journal date pattern."""
    out = []
    for kind, text in _tokenize(fmt):
        if kind == "literal":
            out.append(text)
            continue
        match text:
            case "yyyy" | "yyy" | "y":
                out.append(str(d.year).zfill(len(text)))
            case "yy":
                out.append(f"{d.year % 100:02d}")
            case "YYYY" | "Y":
                out.append(str(week_numbering_year(d, week_start, first_week_contains_date)).zfill(len(text)))
            case "MMMM":
                out.append(MONTH_NAMES[d.month - 1])
            case "MMM":
                out.append(MONTH_NAMES[d.month - 1][:3])
            case "MM":
                out.append(f"{d.month:02d}")
            case "M":
                out.append(str(d.month))
            case "Mo":
                out.append(ordinal(d.month))
            case "dd":
                out.append(f"{d.day:02d}")
            case "d":
                out.append(str(d.day))
            case "do":
                out.append(ordinal(d.day))
            case "EEEE":
                out.append(WEEKDAY_NAMES[d.weekday()])
            case "EEE" | "EE" | "E":
                out.append(WEEKDAY_NAMES[d.weekday()][:3])
            case "ww":
                out.append(f"{week_number(d, week_start, first_week_contains_date):02d}")
            case "w":
                out.append(str(week_number(d, week_start, first_week_contains_date)))
            case "wo":
                out.append(ordinal(week_number(d, week_start, first_week_contains_date)))
            case _:
                raise ValueError(f"Unsupported date pattern token: {text}")
    return "".join(out)


def day_key(d: date) -> int:
    """Milliseconds since epoch at local midnight of d."""
    return int(datetime.combine(d, time.min).timestamp() * 1000)


def has_day_key(d: date) -> bool:
    """Whether d's local midnight is representable as an epoch timestamp."""
    try:
        day_key(d)
    except (ValueError, OverflowError, OSError):
        return False
    return True


def from_day_key(key: int) -> date:
    return datetime.fromtimestamp(key / 1000).date()


def day_number_to_date(day_number: int) -> date:
    """20240315 -> date(2024, 3, 15)."""
    return date(day_number // 10000, day_number // 100 % 100, day_number % 100)


def date_to_day_number(d: date) -> int:
    return d.year * 10000 + d.month * 100 + d.day


def month_window(year: int, month: int) -> tuple[date, date]:
    """First day of the month and first day of the following month."""
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


def fill_window(year: int, month: int) -> tuple[date, date]:
    """Month padded on both sides, inclusive, as shown by a month grid."""
    start, end = month_window(year, month)
    return (
        start - timedelta(days=FILL_PADDING_DAYS),
        end - timedelta(days=1) + timedelta(days=FILL_PADDING_DAYS),
    )
