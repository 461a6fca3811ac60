"""Removal guard against dangling descendants."""

import asyncio
import logging
from typing import Optional

from .pool import map_limit
from ..errors import HasDescendants
from ..models import TreeOptions, RemoveResult
from ..store import DocumentStore, Filter, Record

logger = logging.getLogger(__name__)


class DeletionGuard:
    """Refuses to remove records that still have descendants."""

    def __init__(self, store: DocumentStore, options: Optional[TreeOptions] = None):
        self.store = store
        self.options = options or TreeOptions()

    async def check(self, record: Optional[Record]) -> None:
        """Permit removal of ``record`` or raise.

        A missing record (None) is always permitted.

        Raises:
            HasDescendants: With every direct and indirect descendant id.
        """
        if record is None:
            return
        opts = self.options
        node_id = record[opts.id_field]
        blocking = await self.store.find({opts.ancestors_field: node_id})
        if blocking:
            raise HasDescendants(node_id, [d[opts.id_field] for d in blocking])

    async def remove(self, record: Optional[Record]) -> bool:
        """Check and remove a single record.

        Returns:
            True if a record was removed.
        """
        await self.check(record)
        if record is None:
            return False
        record_id = record[self.options.id_field]
        removed = await asyncio.shield(self.store.remove(record_id))
        if removed:
            logger.debug(f"Removed {record_id}")
        return removed

    async def remove_many(self, filter: Filter) -> RemoveResult:
        """Remove every record matching ``filter`` that has no descendants.

        Each match is checked and removed independently. All matches are
        attempted; the first failure is raised after the sweep.
        """
        opts = self.options
        records = await self.store.find(filter)
        removed = []

        async def remove_one(record: Record) -> None:
            if await self.remove(record):
                removed.append(record[opts.id_field])

        try:
            await map_limit(records, opts.concurrency, remove_one, stop_on_error=False)
        except HasDescendants as e:
            logger.debug(f"Bulk remove: {len(removed)} of {len(records)} removed, first refusal on {e.node_id}")
            raise
        return RemoveResult(removed=removed)
