"""Output formatting module."""

from .json_formatter import print_json
from .console import (
    print_record,
    print_rebuild,
    print_removed,
    print_mismatches,
)
from .tree import (
    build_forest,
    print_forest,
    forest_to_dict,
)

__all__ = [
    "print_json",
    "print_record",
    "print_rebuild",
    "print_removed",
    "print_mismatches",
    "build_forest",
    "print_forest",
    "forest_to_dict",
]
