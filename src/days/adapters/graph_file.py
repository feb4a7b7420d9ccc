"""JSON graph export adapter - an in-memory document store."""

import json
import re
import shlex
from pathlib import Path

from days.core.content import block_ref_ids
from days.core.dates import strip_link_brackets
from days.core.entries import Entry
from days.ports.document_store import QueryTemplate, StoreError

_PAGE_REF = re.compile(r"\[\[([^\[\]]+)\]\]")
_TAG = re.compile(r"(?:^|\s)#([\w\-/]+)")
_SIMPLE_QUERY = re.compile(r"^\((property|page-property|task)\s+(.+)\)$", re.DOTALL)


class GraphFileStore:
    """
    Graph loaded from a JSON export.

    Implements DocumentStore protocol. The export is a list of entries (or
    {"entries": [...]}) in Editor API shape; blocks point at their page with
    "page": {"id": <page uuid or db id>}. Raw queries accept a small subset of
    the simple query language: [[page]], (property key [value]),
    (page-property key [value]) and (task MARKER ...).
    """

    def __init__(self, entries: list[Entry]):
        self.entries = list(entries)
        self._by_id: dict[str | int, Entry] = {}
        self._by_name: dict[str, Entry] = {}
        for entry in self.entries:
            self._by_id[entry.id] = entry
            if entry.db_id is not None:
                self._by_id[entry.db_id] = entry
            if entry.name:
                self._by_name[entry.name.lower()] = entry

    @classmethod
    def from_dicts(cls, items: list[dict]) -> "GraphFileStore":
        return cls([Entry.from_api(item) for item in items])

    @classmethod
    def from_file(cls, path: Path | str) -> "GraphFileStore":
        """Load a graph export. Raises StoreError if it cannot be read."""
        path = Path(path).expanduser()
        try:
            data = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read graph file {path}: {e}") from e
        if isinstance(data, dict):
            data = data.get("entries", [])
        return cls.from_dicts(data)

    # ============== DocumentStore ==============

    async def get_entry_by_name(self, name: str) -> Entry | None:
        return self._by_name.get(name.lower())

    async def get_entry_by_id(self, entry_id: str | int) -> Entry | None:
        return self._by_id.get(entry_id)

    async def run_declarative_query(self, template: QueryTemplate, *params) -> list[tuple]:
        match template:
            case QueryTemplate.JOURNAL_REFERENCES:
                return self._journal_references(*params)
            case QueryTemplate.ENTRIES_WITH_PROPERTY:
                (name,) = params
                return [(b,) for b in self._blocks() if b.property_values(name)]
            case QueryTemplate.CONTENTFUL_JOURNALS:
                return self._contentful_journals(*params)
            case QueryTemplate.JOURNAL_TASKS:
                return self._journal_tasks(*params)
            case QueryTemplate.SCHEDULED_ENTRIES:
                return self._scheduled_entries()
            case QueryTemplate.EVENTS_IN_RANGE:
                return self._events_in_range(*params)
        raise StoreError(f"Unsupported query: {template}")

    async def run_raw_query(self, source: str) -> list[Entry]:
        source = source.strip()
        ref = _PAGE_REF.fullmatch(source)
        if ref:
            target = self._by_name.get(ref.group(1).lower())
            if target is None:
                return []
            return [b for b in self._blocks() if self._references(b, target)]

        simple = _SIMPLE_QUERY.match(source)
        if not simple:
            raise StoreError(f"Unsupported query: {source}")
        kind = simple.group(1)
        try:
            args = shlex.split(simple.group(2))
        except ValueError as e:
            raise StoreError(f"Malformed query {source}: {e}") from e
        if not args:
            raise StoreError(f"Query needs arguments: {source}")

        if kind == "task":
            markers = {a.upper() for a in args}
            return [b for b in self._blocks() if b.marker in markers]

        key, wanted = args[0], args[1:]
        candidates = self._pages() if kind == "page-property" else self._blocks()
        return [e for e in candidates if _has_property(e, key, wanted)]

    # ============== Structured queries ==============

    def _journal_references(self, uuid: str) -> list[tuple]:
        target = self._by_id.get(uuid)
        if target is None:
            return []
        rows = []
        for block in self._blocks():
            page = self._page_of(block)
            if page is not None and page.is_journal and self._references(block, target):
                rows.append((page, block))
        return rows

    def _contentful_journals(self, start: int, end: int) -> list[tuple]:
        pages = {}
        for block in self._blocks():
            page = self._page_of(block)
            if page is not None and _journal_in_range(page, start, end):
                pages[page.id] = page
        return [(page,) for page in pages.values()]

    def _journal_tasks(self, start: int, end: int) -> list[tuple]:
        rows = []
        for block in self._blocks():
            page = self._page_of(block)
            if block.marker and page is not None and _journal_in_range(page, start, end):
                rows.append((page.journal_day, block))
        return rows

    def _scheduled_entries(self) -> list[tuple]:
        rows = []
        for block in self.entries:
            if block.marker in ("DONE", "CANCELLED"):
                continue
            for day_number in sorted({block.scheduled, block.deadline} - {None}):
                rows.append((day_number, block))
        return rows

    def _events_in_range(self, start: int, end: int) -> list[tuple]:
        rows = []
        for block in self.entries:
            if block.marker == "CANCELLED":
                continue
            if any(d is not None and start <= d <= end for d in (block.scheduled, block.deadline)):
                rows.append((block,))
        return rows

    # ============== Helpers ==============

    def _pages(self) -> list[Entry]:
        return [e for e in self.entries if e.is_page]

    def _blocks(self) -> list[Entry]:
        return [e for e in self.entries if not e.is_page]

    def _page_of(self, block: Entry) -> Entry | None:
        if block.page_id is None:
            return None
        return self._by_id.get(block.page_id)

    def _references(self, block: Entry, target: Entry) -> bool:
        """Whether block refers to target by explicit ref, [[link]], #tag or ((uuid))."""
        refs = {str(r).lower() for r in block.refs}
        refs.update(name.lower() for name in _PAGE_REF.findall(block.content))
        refs.update(tag.lower() for tag in _TAG.findall(block.content))
        refs.update(block_ref_ids(block.content))
        keys = {target.id}
        if target.db_id is not None:
            keys.add(str(target.db_id))
        if target.name:
            keys.add(target.name.lower())
        return bool(refs & keys)


def _journal_in_range(page: Entry, start: int, end: int) -> bool:
    return page.is_journal and page.journal_day is not None and start <= page.journal_day <= end


def _has_property(entry: Entry, key: str, wanted: list[str]) -> bool:
    values = entry.property_values(key)
    if not values:
        return False
    if not wanted:
        return True
    normalized = {strip_link_brackets(v).lower() for v in values}
    return any(strip_link_brackets(w).lower() in normalized for w in wanted)
