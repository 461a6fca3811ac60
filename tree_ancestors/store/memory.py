"""In-memory document store."""

import copy
import logging
import uuid
from collections import defaultdict
from typing import Any, Iterable, Optional

from .base import DocumentStore, Filter, Record
from ..errors import StoreIOError

logger = logging.getLogger(__name__)


def _hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


def matches(record: Record, filter: Filter) -> bool:
    """Check a record against a filter.

    A list-valued field matches a scalar condition when it contains it.
    A missing field matches only ``None``.
    """
    for field, expected in filter.items():
        actual = record.get(field)
        if isinstance(actual, list) and not isinstance(expected, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


class InMemoryStore(DocumentStore):
    """Dict-backed store with optional per-field value indexes.

    Records are deep-copied on the way in and out so callers never share
    state (or chain lists) with the store.
    """

    def __init__(self, id_field: str = "_id", records: Optional[Iterable[Record]] = None):
        self.id_field = id_field
        self._records: dict[Any, Record] = {}
        # field -> value -> ids; list fields are indexed per element
        self._indexes: dict[str, dict[Any, set]] = {}
        for record in records or []:
            self._put(copy.deepcopy(record))

    def __len__(self) -> int:
        return len(self._records)

    @property
    def indexes(self) -> list[str]:
        return sorted(self._indexes)

    def all(self) -> list[Record]:
        """Return copies of every record in insertion order."""
        return [copy.deepcopy(r) for r in self._records.values()]

    def _put(self, record: Record):
        record_id = record.get(self.id_field)
        if record_id is None:
            record_id = uuid.uuid4().hex
            record[self.id_field] = record_id
        if not _hashable(record_id):
            raise StoreIOError("insert", f"unhashable id {record_id!r}")
        old = self._records.get(record_id)
        if old is not None:
            self._unindex(old)
        self._records[record_id] = record
        self._index(record)

    def _index_keys(self, record: Record, field: str) -> list:
        value = record.get(field)
        values = value if isinstance(value, list) else [value]
        return [v for v in values if _hashable(v)]

    def _index(self, record: Record):
        record_id = record[self.id_field]
        for field, index in self._indexes.items():
            for key in self._index_keys(record, field):
                index[key].add(record_id)

    def _unindex(self, record: Record):
        record_id = record[self.id_field]
        for field, index in self._indexes.items():
            for key in self._index_keys(record, field):
                ids = index.get(key)
                if ids is not None:
                    ids.discard(record_id)
                    if not ids:
                        del index[key]

    def _candidates(self, filter: Filter) -> Iterable[Record]:
        """Narrow the scan using an index or the id field when possible."""
        if self.id_field in filter and _hashable(filter[self.id_field]):
            record = self._records.get(filter[self.id_field])
            return [record] if record is not None else []
        for field, value in filter.items():
            index = self._indexes.get(field)
            if index is not None and _hashable(value) and not isinstance(value, list):
                ids = index.get(value, set())
                # preserve insertion order
                return [r for rid, r in self._records.items() if rid in ids]
        return list(self._records.values())

    def _match(self, filter: Filter) -> list[Record]:
        return [r for r in self._candidates(filter) if matches(r, filter)]

    async def find_one(self, filter: Filter) -> Optional[Record]:
        found = self._match(filter)
        return copy.deepcopy(found[0]) if found else None

    async def find(self, filter: Filter) -> list[Record]:
        return [copy.deepcopy(r) for r in self._match(filter)]

    async def insert(self, record: Record) -> Record:
        record = copy.deepcopy(record)
        record_id = record.get(self.id_field)
        if record_id is not None and record_id in self._records:
            raise StoreIOError("insert", f"duplicate id {record_id!r}")
        self._put(record)
        logger.debug(f"Inserted {record[self.id_field]}")
        return copy.deepcopy(record)

    async def update(self, filter: Filter, patch: Record, multi: bool = False) -> int:
        if self.id_field in patch:
            raise StoreIOError("update", f"cannot change {self.id_field}")
        targets = self._match(filter)
        if not multi:
            targets = targets[:1]
        for record in targets:
            self._unindex(record)
            for field, value in patch.items():
                record[field] = copy.deepcopy(value)
            self._index(record)
        return len(targets)

    async def remove(self, record_id: Any) -> bool:
        record = self._records.pop(record_id, None)
        if record is None:
            return False
        self._unindex(record)
        logger.debug(f"Removed {record_id}")
        return True

    async def create_index(self, field: str) -> None:
        if field in self._indexes:
            return
        index: dict[Any, set] = defaultdict(set)
        self._indexes[field] = index
        for record in self._records.values():
            for key in self._index_keys(record, field):
                index[key].add(record[self.id_field])
        logger.debug(f"Created index on {field}")
