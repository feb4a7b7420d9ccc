"""Query engine - failure-isolating wrapper around a document store."""

import logging

from days.core.entries import Entry, is_uuid
from days.ports.document_store import DocumentStore, QueryTemplate

logger = logging.getLogger(__name__)


class QueryEngine:
    """
    Forwards lookups and queries to a DocumentStore.

    Any store fault is logged and turned into an empty result, so callers
    never see store exceptions.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def run_structured(self, template: QueryTemplate, *params) -> list[tuple]:
        """Run a structured query. Returns [] on failure."""
        try:
            rows = await self.store.run_declarative_query(template, *params)
        except Exception as e:
            logger.warning(f"Structured query {template.name} failed: {e}")
            return []
        return [tuple(row) if isinstance(row, (list, tuple)) else (row,) for row in rows or []]

    async def run_raw(self, query: str) -> list[Entry]:
        """Run a user-authored query. Returns [] on failure."""
        try:
            entries = await self.store.run_raw_query(query)
        except Exception as e:
            logger.warning(f"Custom query failed: {e}")
            return []
        return list(entries or [])

    async def get_page(self, key: str | int) -> Entry | None:
        """Page by name or database id."""
        try:
            if isinstance(key, int):
                return await self.store.get_entry_by_id(key)
            return await self.store.get_entry_by_name(key)
        except Exception as e:
            logger.warning(f"Page lookup for {key!r} failed: {e}")
            return None

    async def get_by_id(self, entry_id: str | int) -> Entry | None:
        """Page or block by UUID or database id."""
        try:
            return await self.store.get_entry_by_id(entry_id)
        except Exception as e:
            logger.warning(f"Lookup of id {entry_id!r} failed: {e}")
            return None

    async def get_entry(self, key: str) -> Entry | None:
        """A block when key is a UUID, otherwise the page with that name."""
        if is_uuid(key):
            return await self.get_by_id(key)
        return await self.get_page(key)

    async def find_entry(self, key: str) -> Entry | None:
        """The page named key, falling back to the entry with that id."""
        return await self.get_page(key) or await self.get_by_id(key)
