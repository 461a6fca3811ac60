"""Ancestor chain arithmetic."""

from typing import Any, Optional, Sequence

from ..errors import CorruptChainError

# parent values that mark a root; any other value, 0 included, is an id
ROOT_PARENTS = (None, "")


def parent_or_none(value: Any) -> Any:
    """Return ``value`` as a parent id, or None when it marks a root."""
    if value is None or value == "":
        return None
    return value


def compute_chain(parent_chain: Optional[Sequence[Any]], parent_id: Any) -> list[Any]:
    """Return the chain of a child of ``parent_id``.

    Always builds a new list; ``parent_chain`` is never modified.
    """
    return [*(parent_chain or ()), parent_id]


def local_suffix(chain: Sequence[Any], node_id: Any) -> list[Any]:
    """Return the part of ``chain`` starting at ``node_id``.

    This is the portion of a descendant's chain internal to the subtree
    rooted at ``node_id``.

    Raises:
        CorruptChainError: If ``node_id`` is absent or repeated.
    """
    positions = [i for i, ancestor in enumerate(chain) if ancestor == node_id]
    if len(positions) != 1:
        raise CorruptChainError(node_id, list(chain))
    return list(chain[positions[0]:])


def rebase_chain(chain: Sequence[Any], node_id: Any, new_chain: Optional[Sequence[Any]]) -> list[Any]:
    """Replace everything above ``node_id`` in ``chain`` with ``new_chain``."""
    return [*(new_chain or ()), *local_suffix(chain, node_id)]
