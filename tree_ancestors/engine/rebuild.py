"""Level-order rebuild of every chain from parent pointers."""

import asyncio
import logging
from typing import Optional

from .chain import ROOT_PARENTS, compute_chain
from .pool import map_limit
from ..models import TreeOptions, RebuildResult
from ..store import DocumentStore, Record

logger = logging.getLogger(__name__)


class RebuildEngine:
    """Recomputes ``ancestors`` for a whole collection.

    Works breadth-first: roots are reset, then each level's parents write
    their children's chain in one bulk update and fetch those children as
    the next level. A level is persisted before the next one starts, so the
    rebuild takes depth + 1 sequential phases regardless of node count.
    """

    def __init__(self, store: DocumentStore, options: Optional[TreeOptions] = None):
        self.store = store
        self.options = options or TreeOptions()

    async def _update_children(self, parent: Record) -> list[Record]:
        """Write the chain of ``parent``'s children and return them re-fetched."""
        opts = self.options
        parent_id = parent[opts.id_field]
        chain = compute_chain(parent.get(opts.ancestors_field), parent_id)
        await asyncio.shield(self.store.update(
            {opts.parent_field: parent_id},
            {opts.ancestors_field: chain},
            multi=True,
        ))
        return await self.store.find({opts.parent_field: parent_id})

    async def rebuild(self) -> RebuildResult:
        """Rebuild every chain. Idempotent and safe to re-run after a failure."""
        opts = self.options
        result = RebuildResult()

        roots = []
        for marker in ROOT_PARENTS:
            roots += await self.store.find({opts.parent_field: marker})
            await asyncio.shield(self.store.update(
                {opts.parent_field: marker},
                {opts.ancestors_field: []},
                multi=True,
            ))
        # roots were persisted with an empty chain
        level = [{**r, opts.ancestors_field: []} for r in roots]
        reached = {r[opts.id_field] for r in level}

        while level:
            result.levels += 1
            result.nodes += len(level)
            logger.debug(f"Rebuild level {result.levels - 1}: {len(level)} node(s)")

            batches = await map_limit(level, opts.concurrency, self._update_children)

            next_level = []
            for children in batches:
                for child in children:
                    child_id = child[opts.id_field]
                    if child_id in reached:
                        continue
                    reached.add(child_id)
                    next_level.append(child)
            level = next_level

        everything = await self.store.find({})
        result.unreached = [
            r[opts.id_field] for r in everything if r[opts.id_field] not in reached
        ]
        if result.unreached:
            logger.warning(
                f"Rebuild left {len(result.unreached)} record(s) unreachable from any root"
            )
        logger.debug(f"Rebuild done: {result.nodes} node(s) in {result.levels} level(s)")
        return result
