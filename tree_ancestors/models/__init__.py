"""Data models for tree-ancestors."""

from .options import TreeOptions, OptionsSpec, load_options
from .results import (
    RebuildResult,
    RemoveResult,
    ChainMismatch,
    TreeEntry,
)

__all__ = [
    "TreeOptions",
    "OptionsSpec",
    "load_options",
    "RebuildResult",
    "RemoveResult",
    "ChainMismatch",
    "TreeEntry",
]
