"""Shared workflow layer between the CLI and other synchronous callers.

Each public function resolves a store and settings from config, runs one
aggregation on a fresh event loop and returns the result.
"""

import asyncio
import logging
from datetime import date
from pathlib import Path

from .adapters.graph_file import GraphFileStore
from .adapters.logseq_api import LogseqApiStore
from .aggregator import DayAggregator, MonthOptions
from .config import Config
from .core.calendar import SyncEvent
from .core.context import DEFAULT_DATE_FORMAT, AggregationContext
from .core.daymap import DayMap
from .core.targets import QueryTarget
from .ports.document_store import DocumentStore, StoreError

logger = logging.getLogger(__name__)


def get_store(config: Config, graph_file: Path | str | None = None) -> DocumentStore:
    """A graph export when one is given or configured, otherwise the Logseq HTTP API."""
    path = graph_file or config.graph_file
    if path:
        return GraphFileStore.from_file(path)
    return LogseqApiStore(config)


async def build_context(config: Config, store: DocumentStore) -> AggregationContext:
    """Settings for aggregation; unset date format and week start come from the graph."""
    default_format = DEFAULT_DATE_FORMAT
    default_week_start = 0
    needs_graph_settings = not config.date_format.strip() or config.week_start is None
    if needs_graph_settings and isinstance(store, LogseqApiStore):
        try:
            user_configs = await store.fetch_user_configs()
        except StoreError as e:
            logger.warning(f"Could not read graph settings, using defaults: {e}")
            user_configs = {}
        default_format = user_configs.get("preferredDateFormat") or DEFAULT_DATE_FORMAT
        # Logseq counts Monday as 0; days counts Sunday as 0
        start_of_week = user_configs.get("preferredStartOfWeek")
        if start_of_week is not None:
            default_week_start = (int(start_of_week) + 1) % 7
    return config.to_context(default_format, default_week_start)


async def open_aggregator(config: Config, graph_file: Path | str | None = None) -> DayAggregator:
    store = get_store(config, graph_file)
    return DayAggregator(store, await build_context(config, store))


def month_days(
    config: Config,
    target: QueryTarget,
    year: int,
    month: int,
    with_all: bool = False,
    with_journal: bool = False,
    graph_file: Path | str | None = None,
) -> tuple[DayMap, AggregationContext]:
    """Day map for a month view, with the settings it was built under."""

    async def run() -> tuple[DayMap, AggregationContext]:
        aggregator = await open_aggregator(config, graph_file)
        options = MonthOptions(year, month, with_all_properties=with_all, with_journal_fill=with_journal)
        return await aggregator.aggregate_for_month(target, options), aggregator.context

    return asyncio.run(run())


def year_days(
    config: Config,
    target: QueryTarget,
    year: int,
    graph_file: Path | str | None = None,
) -> tuple[DayMap, str | None]:
    """Day map and title for a year view."""

    async def run() -> tuple[DayMap, str | None]:
        aggregator = await open_aggregator(config, graph_file)
        return await aggregator.aggregate_for_year(target, year)

    return asyncio.run(run())


def events_to_sync(
    config: Config,
    start: date,
    end: date,
    graph_file: Path | str | None = None,
) -> dict[str, SyncEvent]:
    """Scheduled and deadline blocks between start and end, for calendar sync."""

    async def run() -> dict[str, SyncEvent]:
        aggregator = await open_aggregator(config, graph_file)
        return await aggregator.events_for_range(start, end)

    return asyncio.run(run())
