"""Document store interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional

Record = dict[str, Any]
Filter = dict[str, Any]


class DocumentStore(ABC):
    """Async document store the engine reads and writes through.

    Filters are ``{field: value}`` mappings. A condition matches when the
    field equals the value, or when the field holds a list containing the
    value. An empty filter matches every record.

    Implementations must return copies: mutating a returned record never
    changes stored state. Failures are raised as ``StoreIOError``.
    """

    @abstractmethod
    async def find_one(self, filter: Filter) -> Optional[Record]:
        """Return the first matching record, or None."""
        pass

    @abstractmethod
    async def find(self, filter: Filter) -> list[Record]:
        """Return all matching records."""
        pass

    @abstractmethod
    async def insert(self, record: Record) -> Record:
        """Insert a record and return it with its identifier set."""
        pass

    @abstractmethod
    async def update(self, filter: Filter, patch: Record, multi: bool = False) -> int:
        """Set ``patch`` fields on matching records and return how many changed."""
        pass

    @abstractmethod
    async def remove(self, record_id: Any) -> bool:
        """Remove a record by identifier; False if it did not exist."""
        pass

    async def create_index(self, field: str) -> None:
        """Declare a lookup index on ``field``. Optional for implementations."""
        return None
