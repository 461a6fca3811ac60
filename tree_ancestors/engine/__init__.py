"""Ancestor-array synchronization engine."""

from .chain import compute_chain, local_suffix, rebase_chain
from .pool import map_limit
from .cascade import CascadePropagator
from .insertion import InsertionHandler
from .deletion import DeletionGuard
from .rebuild import RebuildEngine
from .verify import expected_chains, find_inconsistencies

__all__ = [
    "compute_chain",
    "local_suffix",
    "rebase_chain",
    "map_limit",
    "CascadePropagator",
    "InsertionHandler",
    "DeletionGuard",
    "RebuildEngine",
    "expected_chains",
    "find_inconsistencies",
]
