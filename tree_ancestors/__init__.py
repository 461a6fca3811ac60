"""tree-ancestors - keep ancestor arrays consistent on flat tree documents."""

from .collection import TreeCollection
from .engine import (
    compute_chain,
    CascadePropagator,
    InsertionHandler,
    DeletionGuard,
    RebuildEngine,
    find_inconsistencies,
)
from .errors import (
    TreeAncestorsError,
    ParentNotFound,
    InvalidParent,
    HasDescendants,
    StoreIOError,
    CorruptChainError,
)
from .models import TreeOptions, RebuildResult, RemoveResult, ChainMismatch
from .store import DocumentStore, InMemoryStore

__version__ = "0.1.0"

__all__ = [
    "TreeCollection",
    "compute_chain",
    "CascadePropagator",
    "InsertionHandler",
    "DeletionGuard",
    "RebuildEngine",
    "find_inconsistencies",
    "TreeAncestorsError",
    "ParentNotFound",
    "InvalidParent",
    "HasDescendants",
    "StoreIOError",
    "CorruptChainError",
    "TreeOptions",
    "RebuildResult",
    "RemoveResult",
    "ChainMismatch",
    "DocumentStore",
    "InMemoryStore",
]
