"""Ports - interfaces/protocols for external dependencies."""

from .document_store import DocumentStore, QueryTemplate, StoreError

__all__ = [
    "DocumentStore",
    "QueryTemplate",
    "StoreError",
]
