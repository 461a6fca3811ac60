"""Document store interface and implementations."""

from .base import DocumentStore, Record, Filter
from .memory import InMemoryStore, matches
from .loader import Snapshot, load_snapshot, dump_snapshot, open_store

__all__ = [
    "DocumentStore",
    "Record",
    "Filter",
    "InMemoryStore",
    "matches",
    "Snapshot",
    "load_snapshot",
    "dump_snapshot",
    "open_store",
]
