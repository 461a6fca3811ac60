"""Forest rendering from flat records."""

from collections import defaultdict
from typing import Any

from rich.console import Console
from rich.tree import Tree

from ..engine.chain import parent_or_none
from ..models import TreeOptions, TreeEntry


def _count_tree_nodes(entries: list[TreeEntry]) -> int:
    """Count total nodes in a tree structure."""
    total = 0
    for entry in entries:
        total += 1
        if entry.children:
            total += _count_tree_nodes(entry.children)
    return total


def build_forest(records: list[dict[str, Any]], options: TreeOptions, label_field: str = "name") -> list[TreeEntry]:
    """Nest flat records under their parents.

    Records whose parent is missing are shown as roots. Records caught in a
    parent cycle are not reachable and are left out.
    """
    ids = {r[options.id_field] for r in records}
    children_of: dict[Any, list[dict[str, Any]]] = defaultdict(list)
    for record in records:
        parent = parent_or_none(record.get(options.parent_field))
        children_of[parent if parent in ids else None].append(record)

    def make_entry(record: dict[str, Any], seen: set) -> TreeEntry:
        node_id = record[options.id_field]
        seen.add(node_id)
        entry = TreeEntry(
            node_id=node_id,
            label=str(record.get(label_field, node_id)),
            ancestors=list(record.get(options.ancestors_field) or []),
        )
        for child in children_of.get(node_id, []):
            if child[options.id_field] not in seen:
                entry.children.append(make_entry(child, seen))
        return entry

    seen: set = set()
    return [make_entry(r, seen) for r in children_of.get(None, [])]


def print_forest(forest: list[TreeEntry], console: Console, title: str = "Forest"):
    """Print a forest with each node's stored chain.

    Args:
        forest: Root entries.
        console: Rich console for output.
        title: Label of the synthetic top node.
    """
    root = Tree(f"[bold]{title}[/bold] [dim]({_count_tree_nodes(forest)} nodes)[/dim]")

    def add_children(parent: Tree, entries: list[TreeEntry]):
        for entry in entries:
            label = f"{entry.label} [dim]{entry.node_id}[/dim]"
            if entry.ancestors:
                label += f" [cyan]{' > '.join(str(a) for a in entry.ancestors)}[/cyan]"
            branch = parent.add(label)
            if entry.children:
                add_children(branch, entry.children)

    add_children(root, forest)
    console.print(root)


def forest_to_dict(forest: list[TreeEntry]) -> dict:
    """Convert a forest to a JSON-serializable dict."""
    def entry_to_dict(entry: TreeEntry) -> dict:
        return {
            "id": entry.node_id,
            "label": entry.label,
            "ancestors": entry.ancestors,
            "children": [entry_to_dict(c) for c in entry.children],
        }

    return {
        "total": _count_tree_nodes(forest),
        "tree": [entry_to_dict(e) for e in forest],
    }
