"""Errors raised by the ancestor-array engine and its stores."""

from typing import Any, Optional


class TreeAncestorsError(Exception):
    """Base class for all tree-ancestors errors."""


class ParentNotFound(TreeAncestorsError):
    """A record references a parent that does not exist.

    ``errors`` maps the offending field to a message so callers can attach it
    to their own validation state.
    """

    def __init__(self, parent_id: Any, field: str = "parent"):
        self.parent_id = parent_id
        self.field = field
        self.errors = {field: f"Parent not found: {parent_id}"}
        super().__init__(f"Parent not found: {parent_id}")


class HasDescendants(TreeAncestorsError):
    """Removal refused because the record still has descendants."""

    def __init__(self, node_id: Any, descendants: list):
        self.node_id = node_id
        self.descendants = list(descendants)
        super().__init__(
            f"Cannot remove {node_id}: {len(self.descendants)} descendant(s) depend on it"
        )


class StoreIOError(TreeAncestorsError):
    """Underlying store read or write failed."""

    def __init__(self, operation: str, detail: Optional[str] = None):
        self.operation = operation
        self.detail = detail
        message = f"Store {operation} failed"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class CorruptChainError(TreeAncestorsError):
    """A descendant's chain does not contain the moved node exactly once."""

    def __init__(self, node_id: Any, chain: list):
        self.node_id = node_id
        self.chain = list(chain)
        super().__init__(
            f"Ancestor chain {self.chain!r} must contain {node_id} exactly once"
        )


class InvalidParent(ParentNotFound):
    """The parent exists but is the record itself or one of its descendants."""

    def __init__(self, parent_id: Any, node_id: Any, field: str = "parent"):
        super().__init__(parent_id, field=field)
        self.node_id = node_id
        self.errors = {field: f"Parent {parent_id} would make {node_id} its own ancestor"}
        self.args = (self.errors[field],)
