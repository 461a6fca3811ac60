"""Operation result types."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class RebuildResult:
    """Result of a full ancestor rebuild."""

    levels: int = 0
    nodes: int = 0
    unreached: list[Any] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True if every record was reached from a root."""
        return not self.unreached


@dataclass
class RemoveResult:
    """Result of a bulk removal."""

    removed: list[Any] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.removed)


@dataclass
class ChainMismatch:
    """Record whose stored chain differs from the one its parents imply."""

    node_id: Any
    expected: list[Any]
    actual: Optional[list[Any]]


@dataclass
class TreeEntry:
    """Single record in a rendered forest."""

    node_id: Any
    label: str
    ancestors: list[Any]
    children: list["TreeEntry"] = field(default_factory=list)
