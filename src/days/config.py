"""Configuration management for Days."""

import logging
import os
import re
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path

from .core.context import DEFAULT_DATE_FORMAT, DEFAULT_WEEK_PAGE_FORMAT, AggregationContext
from .core.properties import DEFAULT_COLOR, MAX_SLOTS, PropertySlot

logger = logging.getLogger(__name__)

DAYS_HOME = Path(os.environ.get("DAYS_HOME", Path.home() / "days"))
CONFIG_FILE = DAYS_HOME / "config" / "days.conf"

_SLOT_KEY = re.compile(r"^(name|color|repeat|repeat_count|repeat_end_at)(\d+)$")
_TRUE = {"1", "true", "yes", "on"}


@dataclass
class Config:
    """Days configuration."""

    logseq_api_url: str = "http://127.0.0.1:12315"
    logseq_api_token: str = ""
    graph_file: str = ""
    # Empty means "use the graph's own preferred date format"
    date_format: str = ""
    week_page_format: str = DEFAULT_WEEK_PAGE_FORMAT
    # 0 = Sunday ... 6 = Saturday
    week_start: int | None = None
    first_week_contains_date: int = 1
    display_scheduled_and_deadline: bool = True
    scheduled_color: str = DEFAULT_COLOR
    deadline_color: str = DEFAULT_COLOR
    properties: list[PropertySlot] = field(
        default_factory=lambda: [PropertySlot() for _ in range(MAX_SLOTS)]
    )

    def to_context(
        self,
        default_date_format: str = DEFAULT_DATE_FORMAT,
        default_week_start: int = 0,
    ) -> AggregationContext:
        """Freeze the settings into the value every aggregation call receives."""
        return AggregationContext(
            date_format=self.date_format.strip() or default_date_format,
            week_page_format=self.week_page_format.strip(),
            week_start=default_week_start if self.week_start is None else self.week_start,
            first_week_contains_date=self.first_week_contains_date,
            display_scheduled_and_deadline=self.display_scheduled_and_deadline,
            scheduled_color=self.scheduled_color,
            deadline_color=self.deadline_color,
            slots=tuple(self.properties),
        )


def _unquote(value: str) -> str:
    """Strip quotes, or an inline " # comment" from unquoted values (colors keep their #)."""
    if value.startswith('"'):
        end_quote = value.find('"', 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if value.startswith("'"):
        end_quote = value.find("'", 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if " #" in value:
        return value.split(" #")[0].strip()
    return value


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid {key.upper()} value {value!r}, using {default}")
        return default


def _set_slot_field(config: Config, field_name: str, number: int, value: str) -> None:
    """Apply one nameN/colorN/repeatN/repeat_countN/repeat_end_atN setting."""
    if not 1 <= number <= MAX_SLOTS:
        logger.warning(f"Ignoring {field_name.upper()}{number}: only {MAX_SLOTS} property slots")
        return
    slot = config.properties[number - 1]
    match field_name:
        case "name":
            slot = replace(slot, name=value)
        case "color":
            slot = replace(slot, color=value or DEFAULT_COLOR)
        case "repeat":
            slot = replace(slot, repeat=value or None)
        case "repeat_count":
            count = _parse_int(f"{field_name}{number}", value, -1) if value else -1
            slot = replace(slot, repeat_count=count)
        case "repeat_end_at":
            end_at = None
            if value:
                try:
                    end_at = date.fromisoformat(value)
                except ValueError:
                    logger.warning(f"Invalid REPEAT_END_AT{number} date {value!r}, ignoring")
            slot = replace(slot, repeat_end_at=end_at)
    config.properties[number - 1] = slot


def load_config(path: Path | None = None) -> Config:
    """Load configuration from days.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        slot_key = _SLOT_KEY.match(key)
        if slot_key:
            _set_slot_field(config, slot_key.group(1), int(slot_key.group(2)), value)
            continue

        match key:
            case "logseq_api_url":
                config.logseq_api_url = value
            case "logseq_api_token":
                config.logseq_api_token = value
            case "graph_file":
                config.graph_file = value
            case "date_format":
                config.date_format = value
            case "week_page_format":
                config.week_page_format = value
            case "week_start":
                week_start = _parse_int(key, value, 0)
                if 0 <= week_start <= 6:
                    config.week_start = week_start
                else:
                    logger.warning(f"WEEK_START must be 0-6, got {week_start}")
            case "first_week_contains_date":
                config.first_week_contains_date = _parse_int(key, value, 1)
            case "display_scheduled_and_deadline":
                config.display_scheduled_and_deadline = value.lower() in _TRUE
            case "scheduled_color":
                config.scheduled_color = value
            case "deadline_color":
                config.deadline_color = value
            case _:
                logger.warning(f"Unknown config key {key.upper()} in {path}")

    return config
