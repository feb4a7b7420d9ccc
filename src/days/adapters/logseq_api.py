"""Logseq HTTP API adapter - document store backed by a running Logseq app."""

import asyncio
import logging

import requests

from days.config import Config, load_config
from days.core.entries import Entry, is_uuid
from days.ports.document_store import QueryTemplate, StoreError

logger = logging.getLogger(__name__)


def encode_param(kind: str, value) -> str | int:
    """Encode a query parameter the way the datascript query API reads it."""
    match kind:
        case "uuid":
            return f'#uuid "{value}"'
        case "keyword":
            return f":{value}"
        case "int":
            return int(value)
    raise ValueError(f"Unknown parameter kind: {kind}")


class LogseqApiStore:
    """
    Logseq HTTP API server adapter.

    Implements DocumentStore protocol. Every plugin API call is a POST to
    /api with a bearer token; calls run in a worker thread so the event loop
    stays free. No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, timeout: int = 30):
        self.config = config or load_config()
        self.base_url = self.config.logseq_api_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()

    def _api_request(self, method: str, *args):
        """Make authenticated API request."""
        if not self.config.logseq_api_token:
            raise StoreError("No Logseq API token. Set LOGSEQ_API_TOKEN in days.conf")
        try:
            resp = self._session.post(
                f"{self.base_url}/api",
                json={"method": method, "args": list(args)},
                headers={"Authorization": f"Bearer {self.config.logseq_api_token}"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json() if resp.content else None
        except (requests.RequestException, ValueError) as e:
            raise StoreError(f"{method} failed: {e}") from e

        if isinstance(data, dict) and "error" in data:
            raise StoreError(f"{method} failed: {data['error']}")
        return data

    async def _call(self, method: str, *args):
        logger.debug(f"Calling {method}")
        return await asyncio.to_thread(self._api_request, method, *args)

    async def get_entry_by_name(self, name: str) -> Entry | None:
        data = await self._call("logseq.Editor.getPage", name)
        return Entry.from_api(data) if isinstance(data, dict) else None

    async def get_entry_by_id(self, entry_id: str | int) -> Entry | None:
        """Database ids resolve as pages (block page refs); UUIDs as blocks, then pages."""
        if isinstance(entry_id, int):
            data = await self._call("logseq.Editor.getPage", entry_id)
        elif is_uuid(entry_id):
            data = await self._call("logseq.Editor.getBlock", entry_id)
            if not data:
                data = await self._call("logseq.Editor.getPage", entry_id)
        else:
            return None
        return Entry.from_api(data) if isinstance(data, dict) else None

    async def run_declarative_query(self, template: QueryTemplate, *params) -> list[tuple]:
        if len(params) != len(template.param_kinds):
            raise StoreError(f"{template.name} takes {len(template.param_kinds)} parameters")
        encoded = [encode_param(kind, value) for kind, value in zip(template.param_kinds, params)]
        data = await self._call("logseq.DB.datascriptQuery", template.text, *encoded)
        rows = []
        for row in data or []:
            items = row if isinstance(row, list) else [row]
            rows.append(tuple(Entry.from_api(i) if isinstance(i, dict) else i for i in items))
        return rows

    async def run_raw_query(self, source: str) -> list[Entry]:
        data = await self._call("logseq.DB.customQuery", source)
        return [Entry.from_api(item) for item in data or [] if isinstance(item, dict)]

    async def fetch_user_configs(self) -> dict:
        """The graph's user settings (preferredDateFormat, preferredStartOfWeek, ...)."""
        data = await self._call("logseq.App.getUserConfigs")
        return data if isinstance(data, dict) else {}
