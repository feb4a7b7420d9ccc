"""Adapters - I/O implementations of ports."""

from .logseq_api import LogseqApiStore
from .graph_file import GraphFileStore

__all__ = [
    "LogseqApiStore",
    "GraphFileStore",
]
