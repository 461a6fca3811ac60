"""Tree collection: a store with lifecycle hooks wired to the engine.

Plays the role of the lifecycle-event dispatcher. Every write goes through
the matching engine handler:

    insert        -> InsertionHandler.prepare, then store.insert
    save          -> InsertionHandler.before_save (re-parent aware)
    update_one    -> write, re-fetch, re-parent if the chain went stale
    update_many   -> same, for every affected record, one at a time
    remove        -> DeletionGuard.remove
    remove_one    -> find_one, then DeletionGuard.remove
    remove_many   -> DeletionGuard.remove_many
"""

import logging
from typing import Any, Optional

from .engine import (
    CascadePropagator,
    InsertionHandler,
    DeletionGuard,
    RebuildEngine,
    find_inconsistencies,
)
from .engine.chain import parent_or_none
from .errors import InvalidParent
from .models import TreeOptions, RebuildResult, RemoveResult, ChainMismatch
from .store import DocumentStore, Filter, Record

logger = logging.getLogger(__name__)


class TreeCollection:
    """Document collection that keeps ancestor chains consistent."""

    def __init__(self, store: DocumentStore, options: Optional[TreeOptions] = None):
        self.store = store
        self.options = options or TreeOptions()
        self.cascade = CascadePropagator(store, self.options)
        self.insertion = InsertionHandler(store, self.options, cascade=self.cascade)
        self.deletion = DeletionGuard(store, self.options)
        self.rebuilder = RebuildEngine(store, self.options)

    async def ensure_indexes(self) -> list[str]:
        """Create parent and ancestors indexes when enabled in the options."""
        opts = self.options
        if not opts.generate_indexes:
            return []
        fields = [opts.parent_field, opts.ancestors_field]
        for field in fields:
            await self.store.create_index(field)
        return fields

    # Reads

    async def get(self, record_id: Any) -> Optional[Record]:
        return await self.store.find_one({self.options.id_field: record_id})

    async def ancestors_of(self, record_id: Any) -> Optional[list[Any]]:
        """Return the stored chain of a record (root first), or None if missing."""
        record = await self.get(record_id)
        if record is None:
            return None
        return list(record.get(self.options.ancestors_field) or [])

    async def descendants_of(self, record_id: Any) -> list[Record]:
        return await self.cascade.descendants(record_id)

    # Writes

    async def insert(self, record: Record) -> Record:
        """Create a record under its declared parent (or as a root)."""
        prepared = await self.insertion.prepare(dict(record))
        return await self.store.insert(prepared)

    async def save(self, record: Record) -> Record:
        """Insert a new record or write an existing one back.

        The chain is owned by the engine: any ``ancestors`` value supplied
        by the caller is ignored.
        """
        opts = self.options
        record = dict(record)
        record_id = record.get(opts.id_field)
        stored = await self.get(record_id) if record_id is not None else None
        if stored is None:
            return await self.insert(record)

        # a record without the parent field keeps its stored parent
        parent_modified = (
            opts.parent_field in record
            and parent_or_none(record[opts.parent_field]) != parent_or_none(stored.get(opts.parent_field))
        )
        record = await self.insertion.before_save(record, is_new=False, parent_modified=parent_modified)

        data = self._data_fields(record)
        if data:
            await self.store.update({opts.id_field: record_id}, data)
        return await self.get(record_id)

    async def update_one(self, filter: Filter, patch: Record) -> Optional[Record]:
        """Update the first match and return it re-fetched, or None."""
        opts = self.options
        target = await self.store.find_one(filter)
        if target is None:
            return None
        record_id = target[opts.id_field]
        await self._validate_patch([record_id], patch)
        await self.store.update({opts.id_field: record_id}, self._strip_chain(patch))
        await self._resync(record_id)
        return await self.get(record_id)

    async def update_many(self, filter: Filter, patch: Record) -> int:
        """Update every match, then re-parent those whose parent changed.

        Re-parenting runs one record at a time so overlapping subtrees never
        cascade concurrently.
        """
        opts = self.options
        targets = await self.store.find(filter)
        ids = [t[opts.id_field] for t in targets]
        await self._validate_patch(ids, patch)

        patch = self._strip_chain(patch)
        for record_id in ids:
            await self.store.update({opts.id_field: record_id}, patch)
        for record_id in ids:
            await self._resync(record_id)
        return len(ids)

    async def remove(self, record_id: Any) -> bool:
        """Remove a record that has no descendants."""
        return await self.deletion.remove(await self.get(record_id))

    async def remove_one(self, filter: Filter) -> Optional[Record]:
        """Remove the first match if it has no descendants and return it, or None."""
        record = await self.store.find_one(filter)
        if not await self.deletion.remove(record):
            return None
        return record

    async def remove_many(self, filter: Filter) -> RemoveResult:
        return await self.deletion.remove_many(filter)

    # Maintenance

    async def rebuild(self) -> RebuildResult:
        return await self.rebuilder.rebuild()

    async def verify(self) -> list[ChainMismatch]:
        return await find_inconsistencies(self.store, self.options)

    # Helpers

    def _strip_chain(self, patch: Record) -> Record:
        return {k: v for k, v in patch.items() if k != self.options.ancestors_field}

    def _data_fields(self, record: Record) -> Record:
        opts = self.options
        tree_fields = {opts.id_field, opts.parent_field, opts.ancestors_field}
        return {k: v for k, v in record.items() if k not in tree_fields}

    async def _validate_patch(self, record_ids: list[Any], patch: Record) -> None:
        """Reject a new parent before anything is written."""
        opts = self.options
        if opts.parent_field not in patch:
            return
        parent_id = parent_or_none(patch[opts.parent_field])
        chain = await self.insertion.chain_for(parent_id)
        for record_id in record_ids:
            if record_id == parent_id or record_id in chain:
                raise InvalidParent(parent_id, record_id, field=opts.parent_field)

    async def _resync(self, record_id: Any) -> None:
        record = await self.get(record_id)
        if record is not None and self.insertion.chain_is_stale(record):
            logger.debug(f"Parent of {record_id} changed, re-parenting")
            await self.insertion.reparent(record)
