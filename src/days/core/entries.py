"""Graph entries (pages and blocks) as returned by a document store."""

import re
import uuid
from dataclasses import dataclass, field

_CAMEL_BOUNDARY = re.compile(r"-([a-z0-9])")


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def dash_to_camel(name: str) -> str:
    """'repeat-end' -> 'repeatEnd' (the Editor API camel-cases property keys)."""
    return _CAMEL_BOUNDARY.sub(lambda m: m.group(1).upper(), name)


def _first(data: dict, *keys: str, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_values(raw) -> list[str]:
    """Normalize a property value to a list of strings."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set)):
        return [str(v) for v in raw]
    return [str(raw)]


def _ref_key(raw) -> str | int | None:
    if isinstance(raw, dict):
        return _first(raw, "uuid", "name", "id")
    return raw


@dataclass
class Entry:
    """A page or block."""

    id: str
    content: str = ""
    db_id: int | None = None
    name: str | None = None
    original_name: str | None = None
    page_id: str | int | None = None
    is_journal: bool = False
    journal_day: int | None = None
    is_pre_block: bool = False
    properties: dict[str, list[str]] = field(default_factory=dict)
    marker: str | None = None
    scheduled: int | None = None
    deadline: int | None = None
    refs: list[str | int] = field(default_factory=list)

    @property
    def is_page(self) -> bool:
        return self.name is not None

    def property_values(self, name: str) -> list[str]:
        """Values of a property, looked up by raw, camel-cased and lower-cased key."""
        for key in (name, dash_to_camel(name), name.lower()):
            if key in self.properties:
                return self.properties[key]
        return []

    @classmethod
    def from_api(cls, data: dict) -> "Entry":
        """Create Entry from an Editor API (camelCase) or datascript pull (kebab-case) payload."""
        page = data.get("page")
        page_id = _first(page, "id", "uuid") if isinstance(page, dict) else page
        properties = {
            str(key).lstrip(":"): _as_values(value)
            for key, value in (data.get("properties") or {}).items()
        }
        db_id = data.get("id")
        return cls(
            id=str(_first(data, "uuid", default=db_id if db_id is not None else "")),
            content=data.get("content") or "",
            db_id=db_id if isinstance(db_id, int) else None,
            name=data.get("name"),
            original_name=_first(data, "originalName", "original-name"),
            page_id=page_id,
            is_journal=bool(_first(data, "journal?", "journal", default=False)),
            journal_day=_first(data, "journalDay", "journal-day"),
            is_pre_block=bool(_first(data, "preBlock?", "pre-block?", default=False)),
            properties=properties,
            marker=data.get("marker"),
            scheduled=data.get("scheduled"),
            deadline=data.get("deadline"),
            refs=[_ref_key(r) for r in data.get("refs") or [] if _ref_key(r) is not None],
        )
