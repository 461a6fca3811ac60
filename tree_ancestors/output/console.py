"""Console output formatters using Rich."""

from typing import Any

from rich.console import Console

from .json_formatter import print_json
from ..engine.chain import parent_or_none
from ..models import TreeOptions, RebuildResult, RemoveResult, ChainMismatch

console = Console()


def print_record(record: dict[str, Any], options: TreeOptions, as_json: bool = False):
    """Print a single record with its chain."""
    if as_json:
        print_json(record)
    else:
        parent = parent_or_none(record.get(options.parent_field))
        console.print(f"[bold]{record.get('name', record[options.id_field])}[/bold]: {record[options.id_field]}")
        console.print(f"  Parent: {'-' if parent is None else parent}")
        chain = record.get(options.ancestors_field) or []
        console.print(f"  Ancestors: {' > '.join(str(a) for a in chain) or '-'}")


def print_rebuild(result: RebuildResult, as_json: bool = False):
    """Print rebuild summary."""
    if as_json:
        print_json({
            "levels": result.levels,
            "nodes": result.nodes,
            "unreached": result.unreached,
        })
    else:
        console.print(f"[green]Rebuilt {result.nodes} nodes in {result.levels} levels[/green]")
        if result.unreached:
            console.print(f"[yellow]{len(result.unreached)} records unreachable from any root:[/yellow]")
            for node_id in result.unreached:
                console.print(f"  {node_id}")


def print_removed(result: RemoveResult, as_json: bool = False):
    """Print removed record ids."""
    if as_json:
        print_json({"removed": result.removed})
    else:
        console.print(f"[green]Removed {result.count} records[/green]")


def print_mismatches(mismatches: list[ChainMismatch], as_json: bool = False):
    """Print chain inconsistencies."""
    if as_json:
        print_json([
            {"id": m.node_id, "expected": m.expected, "actual": m.actual}
            for m in mismatches
        ])
    else:
        if not mismatches:
            console.print("[green]All ancestor chains are consistent[/green]")
            return

        console.print(f"[yellow]Found {len(mismatches)} inconsistent chains:[/yellow]")
        for m in mismatches:
            console.print(f"  {m.node_id}: stored {m.actual!r}, expected {m.expected!r}")
