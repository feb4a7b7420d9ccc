"""Tests for the JSON graph export adapter."""

import json

import pytest

from days.adapters.graph_file import GraphFileStore
from days.ports.document_store import QueryTemplate, StoreError

UUID = "6650f1a2-0000-4000-8000-000000000001"


@pytest.fixture
def items():
    return [
        {"uuid": "p-project", "id": 10, "name": "project", "originalName": "Project"},
        {"uuid": "p-notes", "name": "notes", "originalName": "Notes",
         "properties": {"type": "[[meeting]]"}},
        {"uuid": "j-0502", "name": "2024-05-02", "journal?": True, "journalDay": 20240502},
        {"uuid": "j-0610", "name": "2024-06-10", "journal?": True, "journalDay": 20240610},
        {"uuid": "b1", "page": {"id": "j-0502"}, "content": "Worked on [[Project]]"},
        {"uuid": "b2", "page": {"id": "j-0502"}, "content": "TODO tag #project", "marker": "TODO"},
        {"uuid": "b3", "page": {"id": "p-notes"}, "content": "Refs", "refs": [{"id": 10}]},
        {"uuid": "b4", "page": {"id": "j-0610"}, "content": "DONE old", "marker": "DONE",
         "scheduled": 20240610},
        {"uuid": UUID, "page": {"id": "p-notes"}, "content": "Budget", "deadline": 20240505,
         "properties": {"status": "open"}},
        {"uuid": "b6", "page": {"id": "j-0610"}, "content": f"See (({UUID}))", "marker": "CANCELLED",
         "scheduled": 20240601},
    ]


@pytest.fixture
def store(items):
    return GraphFileStore.from_dicts(items)


class TestLoading:
    def test_from_file_list(self, tmp_path, items):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps(items))
        assert len(GraphFileStore.from_file(path).entries) == len(items)

    def test_from_file_wrapped(self, tmp_path, items):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({"entries": items}))
        assert len(GraphFileStore.from_file(path).entries) == len(items)

    def test_missing_file(self, tmp_path):
        with pytest.raises(StoreError):
            GraphFileStore.from_file(tmp_path / "missing.json")

    def test_bad_json(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text("{not json")
        with pytest.raises(StoreError):
            GraphFileStore.from_file(path)


class TestLookups:
    @pytest.mark.asyncio
    async def test_by_name_is_case_insensitive(self, store):
        entry = await store.get_entry_by_name("PROJECT")
        assert entry.id == "p-project"

    @pytest.mark.asyncio
    async def test_by_uuid_and_db_id(self, store):
        assert (await store.get_entry_by_id(UUID)).content == "Budget"
        assert (await store.get_entry_by_id(10)).name == "project"
        assert await store.get_entry_by_id("nope") is None


class TestStructuredQueries:
    @pytest.mark.asyncio
    async def test_journal_references(self, store):
        rows = await store.run_declarative_query(QueryTemplate.JOURNAL_REFERENCES, "p-project")
        assert [(page.id, block.id) for page, block in rows] == [("j-0502", "b1"), ("j-0502", "b2")]

    @pytest.mark.asyncio
    async def test_block_ref_counts_as_reference(self, store):
        rows = await store.run_declarative_query(QueryTemplate.JOURNAL_REFERENCES, UUID)
        assert [block.id for _, block in rows] == ["b6"]

    @pytest.mark.asyncio
    async def test_entries_with_property_skips_pages(self, store):
        rows = await store.run_declarative_query(QueryTemplate.ENTRIES_WITH_PROPERTY, "type")
        assert rows == []
        rows = await store.run_declarative_query(QueryTemplate.ENTRIES_WITH_PROPERTY, "status")
        assert [row[0].id for row in rows] == [UUID]

    @pytest.mark.asyncio
    async def test_contentful_journals_in_range(self, store):
        rows = await store.run_declarative_query(QueryTemplate.CONTENTFUL_JOURNALS, 20240501, 20240531)
        assert [row[0].id for row in rows] == ["j-0502"]

    @pytest.mark.asyncio
    async def test_journal_tasks(self, store):
        rows = await store.run_declarative_query(QueryTemplate.JOURNAL_TASKS, 20240501, 20240630)
        assert [(day, block.id) for day, block in rows] == [
            (20240502, "b2"), (20240610, "b4"), (20240610, "b6"),
        ]

    @pytest.mark.asyncio
    async def test_scheduled_entries_skip_done_and_cancelled(self, store):
        rows = await store.run_declarative_query(QueryTemplate.SCHEDULED_ENTRIES)
        assert [(day, block.id) for day, block in rows] == [(20240505, UUID)]

    @pytest.mark.asyncio
    async def test_events_skip_only_cancelled(self, store):
        rows = await store.run_declarative_query(QueryTemplate.EVENTS_IN_RANGE, 20240501, 20240630)
        assert [row[0].id for row in rows] == ["b4", UUID]


class TestRawQueries:
    @pytest.mark.asyncio
    async def test_page_reference(self, store):
        result = await store.run_raw_query("[[Project]]")
        assert [e.id for e in result] == ["b1", "b2", "b3"]

    @pytest.mark.asyncio
    async def test_page_property_with_link_value(self, store):
        result = await store.run_raw_query("(page-property type meeting)")
        assert [e.id for e in result] == ["p-notes"]

    @pytest.mark.asyncio
    async def test_property_any_value(self, store):
        result = await store.run_raw_query("(property status)")
        assert [e.id for e in result] == [UUID]

    @pytest.mark.asyncio
    async def test_task(self, store):
        result = await store.run_raw_query("(task todo done)")
        assert [e.id for e in result] == ["b2", "b4"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("source", ["[:find ?b :where [?b :block/name]]", "(task)", "(property \"open)"])
    async def test_unsupported(self, store, source):
        with pytest.raises(StoreError):
            await store.run_raw_query(source)
