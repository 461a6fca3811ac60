"""Ancestor chain assignment on create and re-parent."""

import asyncio
import logging
from typing import Any, Optional

from .chain import compute_chain, parent_or_none
from .cascade import CascadePropagator
from ..errors import InvalidParent, ParentNotFound
from ..models import TreeOptions
from ..store import DocumentStore, Record

logger = logging.getLogger(__name__)


class InsertionHandler:
    """Computes a record's chain from its declared parent.

    Handles both new records (before they are persisted) and existing
    records whose parent reference changed.
    """

    def __init__(self, store: DocumentStore, options: Optional[TreeOptions] = None,
                 cascade: Optional[CascadePropagator] = None):
        self.store = store
        self.options = options or TreeOptions()
        self.cascade = cascade or CascadePropagator(store, self.options)

    async def chain_for(self, parent_id: Any) -> list[Any]:
        """Resolve ``parent_id`` and return the chain of its children.

        Raises:
            ParentNotFound: If no record has that identifier.
        """
        if parent_id is None:
            return []
        opts = self.options
        parent = await self.store.find_one({opts.id_field: parent_id})
        if parent is None:
            raise ParentNotFound(parent_id, field=opts.parent_field)
        return compute_chain(parent.get(opts.ancestors_field), parent[opts.id_field])

    async def prepare(self, record: Record) -> Record:
        """Set ``parent`` and ``ancestors`` on a record about to be created."""
        opts = self.options
        parent_id = parent_or_none(record.get(opts.parent_field))
        if parent_id is None:
            record[opts.parent_field] = None
            record[opts.ancestors_field] = []
            return record

        record[opts.ancestors_field] = await self.chain_for(parent_id)
        logger.debug(f"New record under {parent_id}: {record[opts.ancestors_field]}")
        return record

    async def reparent(self, record: Record) -> Record:
        """Recompute the chain of an existing record and cascade it.

        The record's own write completes before descendants are touched.
        """
        opts = self.options
        record_id = record[opts.id_field]
        parent_id = parent_or_none(record.get(opts.parent_field))
        if parent_id is not None and parent_id == record_id:
            raise InvalidParent(parent_id, record_id, field=opts.parent_field)

        chain = await self.chain_for(parent_id)
        if record_id in chain:
            # new parent sits inside this record's own subtree
            raise InvalidParent(parent_id, record_id, field=opts.parent_field)

        record[opts.parent_field] = parent_id
        record[opts.ancestors_field] = chain
        await asyncio.shield(self.store.update(
            {opts.id_field: record_id},
            {opts.parent_field: parent_id, opts.ancestors_field: list(chain)},
        ))
        logger.debug(f"Re-parented {record_id} under {parent_id}: {chain}")

        await self.cascade.propagate(record_id, chain)
        return record

    async def before_save(self, record: Record, is_new: bool, parent_modified: bool = False) -> Record:
        """Save-hook entry point.

        Updates that leave the parent field alone do not touch the tree.
        """
        if is_new:
            return await self.prepare(record)
        if not parent_modified:
            return record
        return await self.reparent(record)

    def chain_is_stale(self, record: Record) -> bool:
        """Check whether a stored chain cannot belong to the stored parent."""
        opts = self.options
        parent_id = parent_or_none(record.get(opts.parent_field))
        chain = record.get(opts.ancestors_field)
        if parent_id is None:
            return chain != []
        return not chain or chain[-1] != parent_id
