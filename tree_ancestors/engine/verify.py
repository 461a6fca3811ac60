"""Consistency check of stored chains against parent pointers."""

from typing import Any, Optional

from .chain import parent_or_none
from ..models import TreeOptions, ChainMismatch
from ..store import DocumentStore, Record


def expected_chains(records: list[Record], options: TreeOptions) -> dict[Any, list[Any]]:
    """Compute each record's chain by walking parent pointers in memory.

    Walks stop at a root, at a missing parent, or on a cycle.
    """
    parent_of = {r[options.id_field]: parent_or_none(r.get(options.parent_field)) for r in records}
    chains: dict[Any, list[Any]] = {}

    for node_id in parent_of:
        path = []
        current = node_id
        visited = {node_id}

        while parent_of.get(current) is not None:
            parent = parent_of[current]
            if parent in visited or parent not in parent_of:
                break  # Cycle or dangling reference
            visited.add(parent)
            path.append(parent)
            current = parent

        # Reverse so the root comes first
        chains[node_id] = list(reversed(path))

    return chains


async def find_inconsistencies(store: DocumentStore, options: Optional[TreeOptions] = None) -> list[ChainMismatch]:
    """Report every record whose stored chain disagrees with its parents."""
    options = options or TreeOptions()
    records = await store.find({})
    chains = expected_chains(records, options)

    mismatches = []
    for record in records:
        node_id = record[options.id_field]
        actual = record.get(options.ancestors_field)
        if actual != chains[node_id]:
            mismatches.append(ChainMismatch(node_id=node_id, expected=chains[node_id], actual=actual))
    return mismatches
