"""Day aggregation - merges every date source of a graph into one day map.

Each gather stage builds its own DayMap delta; the aggregator folds the
deltas together in stage order, so the merge policy of DayMap decides every
conflict. A stage whose store call fails contributes nothing.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime

from days.core.calendar import SyncEvent, sort_events_by_start
from days.core.content import block_ref_ids, content_title, parse_scheduled
from days.core.context import AggregationContext
from days.core.dates import (
    date_to_day_number,
    day_number_to_date,
    fill_window,
    has_day_key,
    month_window,
    parse_date,
)
from days.core.daymap import Annotation, DayMap
from days.core.entries import Entry
from days.core.properties import FAR_FUTURE, PropertySlot
from days.core.recurrence import expand, parse_repeater
from days.core.targets import (
    CustomQueryTarget,
    DynamicTarget,
    EmptyTarget,
    NamedTarget,
    QueryTarget,
)
from days.ports.document_store import DocumentStore, QueryTemplate
from days.query import QueryEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthOptions:
    """Which month to aggregate and which sources to include."""

    year: int
    month: int
    with_all_properties: bool = False
    with_journal_fill: bool = False
    date_format: str | None = None


def _journal_date(day_number) -> date | None:
    if not isinstance(day_number, int):
        return None
    try:
        day = day_number_to_date(day_number)
    except ValueError:
        return None
    return day if has_day_key(day) else None


def _row_entries(row: tuple) -> list[Entry]:
    return [item for item in row if isinstance(item, Entry)]


class DayAggregator:
    """
    Builds day maps for month views, year views and calendar sync.

    Public methods never raise on store failures; the worst case is a map
    with fewer days.
    """

    def __init__(self, store: DocumentStore, context: AggregationContext):
        self.engine = QueryEngine(store)
        self.context = context

    # ============== Public operations ==============

    async def aggregate_for_month(self, target: QueryTarget, options: MonthOptions) -> DayMap:
        """Day map for one month of a days view."""
        match target:
            case DynamicTarget(current_name=None):
                options = replace(options, with_all_properties=True, with_journal_fill=True)
                return await self._for_empty(options)
            case DynamicTarget(current_name=name):
                options = replace(options, with_all_properties=True, with_journal_fill=True)
                return await self._for_entry(name, options)
            case CustomQueryTarget(query=query):
                return await self._for_custom(query, options)
            case NamedTarget(name=name):
                return await self._for_entry(name, options)
            case EmptyTarget():
                return await self._for_empty(options)
        raise TypeError(f"Unknown query target: {target!r}")

    async def aggregate_for_year(self, target: QueryTarget, year: int) -> tuple[DayMap, str | None]:
        """Journal days of one year linked to the target, and a title for the view."""
        match target:
            case CustomQueryTarget(query=query, title=title):
                days = await self._custom_query_days(query)
            case NamedTarget(name=name) | DynamicTarget(current_name=str() as name):
                entry = await self.engine.find_entry(name)
                if entry is None:
                    logger.info(f"No page or block found for {name!r}")
                    return DayMap(), None
                days = await self._direct_references(entry)
                title = entry.original_name or await self.display_text(entry.content)
            case _:
                return DayMap(), None
        return days.filter(lambda d: d.year == year), title

    async def events_for_range(self, start: date, end: date) -> dict[str, SyncEvent]:
        """Scheduled and deadline blocks between start and end (inclusive), by block id."""
        if isinstance(start, datetime):
            start = start.date()
        if isinstance(end, datetime):
            end = end.date()
        rows = await self.engine.run_structured(
            QueryTemplate.EVENTS_IN_RANGE, date_to_day_number(start), date_to_day_number(end)
        )
        events = {}
        for row in rows:
            for entry in _row_entries(row):
                parsed = parse_scheduled(entry.content)
                if parsed is None:
                    logger.debug(f"Block {entry.id} has no readable timestamp")
                    continue
                begin, all_day = parsed
                title = await self.display_text(entry.content)
                events[entry.id] = SyncEvent.from_timestamp(title, begin, all_day)
        return sort_events_by_start(events)

    async def display_text(self, content: str) -> str:
        """Block title with ((block references)) replaced by the referenced block's title."""
        text = content_title(content)
        for ref_id in block_ref_ids(text):
            ref = await self.engine.get_by_id(ref_id)
            if ref is not None:
                text = text.replace(f"(({ref_id}))", content_title(ref.content))
        return text

    # ============== Target dispatch ==============

    async def _for_entry(self, name: str, options: MonthOptions) -> DayMap:
        entry = await self.engine.get_entry(name)
        if entry is None:
            logger.info(f"No page or block found for {name!r}")
            return DayMap()

        days = DayMap()
        days.merge(await self._direct_references(entry))
        if options.with_all_properties:
            days.merge(await self._slot_days(options))
        else:
            days.merge(await self._entry_slot_days(entry, options))
        days.merge(self._current_day(entry))
        if options.with_journal_fill:
            days.merge(await self._journal_fill(options))
        return days

    async def _for_custom(self, query: str, options: MonthOptions) -> DayMap:
        days = await self._custom_query_days(query)
        if options.with_all_properties:
            days.merge(await self._slot_days(options))
        return days

    async def _for_empty(self, options: MonthOptions) -> DayMap:
        days = await self._slot_days(options)
        if options.with_journal_fill:
            days.merge(await self._journal_fill(options))
        return days

    # ============== Gather stages ==============

    async def _direct_references(self, entry: Entry) -> DayMap:
        """Journal days the entry lives on or is referenced from."""
        days = DayMap()
        if entry.page_id is not None:
            page = await self.engine.get_by_id(entry.page_id)
            if page is not None and page.is_journal:
                day = _journal_date(page.journal_day)
                if day:
                    days.link(day, entry.id)

        rows = await self.engine.run_structured(QueryTemplate.JOURNAL_REFERENCES, entry.id)
        for row in rows:
            found = _row_entries(row)
            if len(found) < 2:
                continue
            journal, block = found[0], found[1]
            day = _journal_date(journal.journal_day)
            if day:
                days.link(day, block.id)
        logger.debug(f"Direct references of {entry.id}: {len(days)} days")
        return days

    def _current_day(self, entry: Entry) -> DayMap:
        days = DayMap()
        if entry.is_journal:
            day = _journal_date(entry.journal_day)
            if day:
                days.mark_current(day)
        return days

    async def _custom_query_days(self, query: str) -> DayMap:
        days = DayMap()
        for entry in await self.engine.run_raw(query):
            day = _journal_date(entry.journal_day)
            if day:
                days.link(day, entry.id)
        logger.debug(f"Custom query matched {len(days)} journal days")
        return days

    async def _slot_days(self, options: MonthOptions) -> DayMap:
        """Every active property slot, scanned across the whole graph."""
        slots = self.context.active_slots()
        # Deltas come back in slot order, so the merge stays deterministic.
        deltas = await asyncio.gather(*(self._property_days(slot, options) for slot in slots))
        days = DayMap()
        for delta in deltas:
            days.merge(delta)
        return days

    async def _entry_slot_days(self, entry: Entry, options: MonthOptions) -> DayMap:
        """Every active property slot, read from the entry's own properties."""
        days = DayMap()
        slots = self.context.active_slots()
        if not slots:
            return days
        name = entry.original_name or await self.display_text(entry.content)
        jump_target = entry.name or entry.id
        for slot in slots:
            annotation = Annotation(name, slot.color, jump_target)
            self._add_property_dates(days, entry.property_values(slot.name), slot, annotation, options)
        return days

    async def _property_days(self, slot: PropertySlot, options: MonthOptions) -> DayMap:
        days = DayMap()
        rows = await self.engine.run_structured(QueryTemplate.ENTRIES_WITH_PROPERTY, slot.name)
        for row in rows:
            for entry in _row_entries(row):
                annotation = await self._annotation_for(entry, slot.color)
                self._add_property_dates(days, entry.property_values(slot.name), slot, annotation, options)
        logger.debug(f"Property {slot.name!r}: {len(days)} days")
        return days

    async def _journal_fill(self, options: MonthOptions) -> DayMap:
        days = DayMap()
        days.merge(await self._contentful_days(options))
        days.merge(await self._task_days(options))
        if self.context.display_scheduled_and_deadline:
            days.merge(await self._scheduled_days(options))
        return days

    async def _contentful_days(self, options: MonthOptions) -> DayMap:
        days = DayMap()
        start, end = fill_window(options.year, options.month)
        rows = await self.engine.run_structured(
            QueryTemplate.CONTENTFUL_JOURNALS, date_to_day_number(start), date_to_day_number(end)
        )
        for row in rows:
            for page in _row_entries(row):
                day = _journal_date(page.journal_day)
                if day is None and page.original_name:
                    day = parse_date(page.original_name, self._date_format(options))
                if day:
                    days.mark_contentful(day)
        return days

    async def _task_days(self, options: MonthOptions) -> DayMap:
        days = DayMap()
        start, end = fill_window(options.year, options.month)
        rows = await self.engine.run_structured(
            QueryTemplate.JOURNAL_TASKS, date_to_day_number(start), date_to_day_number(end)
        )
        for row in rows:
            if len(row) < 2 or not isinstance(row[1], Entry) or not row[1].marker:
                continue
            day = _journal_date(row[0])
            if day:
                days.mark_task(day)
        return days

    async def _scheduled_days(self, options: MonthOptions) -> DayMap:
        days = DayMap()
        fill_start, fill_end = fill_window(options.year, options.month)
        window_start, window_end = month_window(options.year, options.month)
        rows = await self.engine.run_structured(QueryTemplate.SCHEDULED_ENTRIES)
        for row in rows:
            if len(row) < 2 or not isinstance(row[1], Entry):
                continue
            day_number, entry = row[0], row[1]
            anchor = _journal_date(day_number)
            if anchor is None:
                continue
            if entry.scheduled == day_number:
                color = self.context.scheduled_color
            else:
                color = self.context.deadline_color
            annotation = await self._annotation_for(entry, color)

            if fill_start <= anchor <= fill_end:
                days.annotate(anchor, annotation)
            rule = parse_repeater(entry.content)
            if rule:
                for occurrence in expand(anchor, rule, math.inf, FAR_FUTURE, window_start, window_end):
                    days.annotate(occurrence, annotation)
        return days

    # ============== Helpers ==============

    def _date_format(self, options: MonthOptions) -> str:
        return options.date_format or self.context.date_format

    async def _annotation_for(self, entry: Entry, color: str) -> Annotation:
        """A page's properties block stands for the page; other blocks for themselves."""
        if entry.is_pre_block and entry.page_id is not None:
            page = await self.engine.get_by_id(entry.page_id)
            if page is not None:
                name = page.original_name or page.name or ""
                return Annotation(name, color, page.name or page.id)
        return Annotation(await self.display_text(entry.content), color, entry.id)

    def _add_property_dates(
        self,
        days: DayMap,
        values: list[str],
        slot: PropertySlot,
        annotation: Annotation,
        options: MonthOptions,
    ) -> None:
        """Annotate each parsable date value and its repetitions in the month."""
        fmt = self._date_format(options)
        window_start, window_end = month_window(options.year, options.month)
        for value in values:
            anchor = parse_date(value, fmt)
            if anchor is None:
                logger.debug(f"Skipping {slot.name} value {value!r}: not a {fmt!r} date")
                continue
            days.annotate(anchor, annotation)
            if slot.repeat:
                occurrences = expand(
                    anchor, slot.repeat, slot.max_occurrences, slot.end_date, window_start, window_end
                )
                for occurrence in occurrences:
                    days.annotate(occurrence, annotation)
