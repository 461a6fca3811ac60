"""Propagation of a changed chain to every descendant."""

import asyncio
import logging
from typing import Any, Optional, Sequence

from .chain import rebase_chain
from .pool import map_limit
from ..models import TreeOptions
from ..store import DocumentStore, Record

logger = logging.getLogger(__name__)


class CascadePropagator:
    """Rewrites the chains of a node's whole subtree in one pass.

    Every descendant already lists the moved node in its chain, so one
    array-contains query finds the subtree at any depth, and each chain is
    fixed by swapping the prefix above the moved node. Intermediate levels
    are never re-derived.
    """

    def __init__(self, store: DocumentStore, options: Optional[TreeOptions] = None):
        self.store = store
        self.options = options or TreeOptions()

    async def descendants(self, node_id: Any) -> list[Record]:
        """Return every record below ``node_id``, at any depth."""
        return await self.store.find({self.options.ancestors_field: node_id})

    async def propagate(self, node_id: Any, new_chain: Optional[Sequence[Any]]) -> int:
        """Rebase every descendant of ``node_id`` onto ``new_chain``.

        Fails fast: after the first failed write no further descendant is
        started, and descendants already written are not rolled back.

        Returns:
            Number of descendants rewritten.
        """
        opts = self.options
        new_chain = list(new_chain or [])
        descendants = await self.descendants(node_id)

        # Compute every chain up front so a corrupt one aborts before any write
        planned = []
        for record in descendants:
            current = record.get(opts.ancestors_field) or []
            chain = rebase_chain(current, node_id, new_chain)
            if chain != current:
                planned.append((record[opts.id_field], chain))

        if not planned:
            logger.debug(f"Cascade from {node_id}: {len(descendants)} descendant(s) already current")
            return 0

        async def write(item: tuple[Any, list[Any]]) -> int:
            record_id, chain = item
            return await asyncio.shield(self.store.update(
                {opts.id_field: record_id},
                {opts.ancestors_field: chain},
            ))

        await map_limit(planned, opts.concurrency, write)
        logger.debug(f"Cascade from {node_id}: rewrote {len(planned)} of {len(descendants)} descendant(s)")
        return len(planned)
