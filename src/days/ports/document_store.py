"""Document store interface."""

from enum import Enum
from typing import Protocol

from days.core.entries import Entry


class StoreError(Exception):
    """Raised when the document store cannot answer a request."""

    pass


class QueryTemplate(Enum):
    """Structured queries the aggregator issues, with their datalog text.

    Each member also names the kind of each positional parameter so adapters
    can encode them ("uuid", "keyword" or "int").
    """

    JOURNAL_REFERENCES = (
        """[:find (pull ?j [:block/journal-day]) (pull ?b [:block/uuid])
 :in $ ?uuid
 :where
 [?t :block/uuid ?uuid]
 [?b :block/refs ?t]
 [?b :block/page ?j]
 [?j :block/journal? true]]""",
        ("uuid",),
    )
    ENTRIES_WITH_PROPERTY = (
        """[:find (pull ?b [*])
 :in $ ?prop
 :where
 [?b :block/properties ?ps]
 [(get ?ps ?prop)]
 (not [?b :block/name])]""",
        ("keyword",),
    )
    CONTENTFUL_JOURNALS = (
        """[:find (pull ?p [:block/uuid :block/original-name :block/journal-day])
 :in $ ?start ?end
 :where
 [?p :block/journal? true]
 [?p :block/journal-day ?d]
 [(>= ?d ?start)]
 [(<= ?d ?end)]
 [?b :block/page ?p]]""",
        ("int", "int"),
    )
    JOURNAL_TASKS = (
        """[:find ?d (pull ?b [:block/uuid :block/marker {:block/page [:block/journal-day]}])
 :in $ ?start ?end
 :where
 [?p :block/journal? true]
 [?p :block/journal-day ?d]
 [?b :block/page ?p]
 [?b :block/marker]
 [(>= ?d ?start)]
 [(<= ?d ?end)]]""",
        ("int", "int"),
    )
    SCHEDULED_ENTRIES = (
        """[:find ?d (pull ?b [:block/uuid :block/content :block/scheduled :block/deadline :block/pre-block? {:block/page [:db/id]}])
 :where
 (or
   [?b :block/scheduled ?d]
   [?b :block/deadline ?d])
 (not [?b :block/marker ?m] [(contains? #{"DONE" "CANCELLED"} ?m)])]""",
        (),
    )
    EVENTS_IN_RANGE = (
        """[:find (pull ?b [:block/content :block/uuid])
 :in $ ?start ?end
 :where
 (or
   [?b :block/scheduled ?d]
   [?b :block/deadline ?d])
 (not [?b :block/marker ?m] [(contains? #{"CANCELLED"} ?m)])
 [(>= ?d ?start)]
 [(<= ?d ?end)]]""",
        ("int", "int"),
    )

    def __init__(self, text: str, param_kinds: tuple[str, ...]):
        self.text = text
        self.param_kinds = param_kinds


class DocumentStore(Protocol):
    """Interface for reading entries and running queries against a graph."""

    async def get_entry_by_name(self, name: str) -> Entry | None:
        """Look up a page by name. Returns None if not found."""
        ...

    async def get_entry_by_id(self, entry_id: str | int) -> Entry | None:
        """Look up a page or block by UUID or database id. Returns None if not found."""
        ...

    async def run_declarative_query(self, template: QueryTemplate, *params) -> list[tuple]:
        """Run a structured query. Rows hold Entry fragments and scalars."""
        ...

    async def run_raw_query(self, source: str) -> list[Entry]:
        """Run a user-authored query."""
        ...
