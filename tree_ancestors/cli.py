"""Main CLI application."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import msgspec
import typer
from rich.console import Console

from .collection import TreeCollection
from .errors import TreeAncestorsError, HasDescendants, ParentNotFound
from .models import TreeOptions, load_options
from .store import open_store, dump_snapshot
from .output import (
    print_json,
    print_record,
    print_rebuild,
    print_removed,
    print_mismatches,
    build_forest,
    print_forest,
    forest_to_dict,
)

app = typer.Typer(
    name="tree-ancestors",
    help="Maintain ancestor arrays on a tree snapshot",
    add_completion=False,
)
console = Console()

FileOption = typer.Option(..., "--file", "-f", help="Path to snapshot JSON")
ConfigOption = typer.Option(None, "--config", "-c", help="Path to options JSON")
JsonOption = typer.Option(False, "--json", "-j", help="Output as JSON")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Maintain ancestor arrays on a tree snapshot."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def get_options(config: Optional[Path]) -> TreeOptions:
    """Load options from file, or defaults."""
    if config is None:
        return TreeOptions()
    if not config.exists():
        console.print(f"[red]Error: Config file not found: {config}[/red]")
        raise typer.Exit(1)
    try:
        return load_options(config)
    except (msgspec.DecodeError, ValueError) as e:
        console.print(f"[red]Error: Invalid config file {config}: {e}[/red]")
        raise typer.Exit(1)


def get_collection(file: Path, config: Optional[Path], create: bool = False) -> TreeCollection:
    """Open the snapshot as a tree collection.

    Only 'add' may start a new snapshot; other commands need an existing file.
    """
    if not create and not file.exists():
        console.print(f"[red]Error: Snapshot file not found: {file}[/red]")
        raise typer.Exit(1)
    options = get_options(config)
    try:
        store = open_store(file, options)
    except msgspec.DecodeError as e:
        console.print(f"[red]Error: Invalid snapshot {file}: {e}[/red]")
        raise typer.Exit(1)
    collection = TreeCollection(store, options)
    asyncio.run(collection.ensure_indexes())
    return collection


def save_collection(file: Path, collection: TreeCollection):
    dump_snapshot(file, collection.store.all())


def fail(error: TreeAncestorsError, json_output: bool):
    """Report an engine error and exit."""
    if json_output:
        payload = {"error": str(error)}
        if isinstance(error, HasDescendants):
            payload["descendants"] = error.descendants
        elif isinstance(error, ParentNotFound):
            payload["errors"] = error.errors
        print_json(payload)
    else:
        console.print(f"[red]Error: {error}[/red]")
        if isinstance(error, HasDescendants):
            for node_id in error.descendants:
                console.print(f"  blocked by {node_id}")
    raise typer.Exit(1)


def resolve_id(collection: TreeCollection, value: Optional[str]):
    """Map a command-line id onto a stored one.

    Ids arrive as strings; snapshots may hold integer ids. A numeric string
    that names no record is tried as an int.
    """
    if value is None or not value.removeprefix("-").isdigit():
        return value
    if asyncio.run(collection.get(value)) is not None:
        return value
    as_int = int(value)
    if asyncio.run(collection.get(as_int)) is not None:
        return as_int
    return value


def parse_where(where: str) -> dict:
    """Parse FIELD=VALUE; 'null' means None."""
    field, sep, value = where.partition("=")
    if not sep or not field:
        console.print(f"[red]Error: Expected FIELD=VALUE, got: {where}[/red]")
        raise typer.Exit(1)
    return {field: None if value == "null" else value}


# =============================================================================
# Read Commands
# =============================================================================


@app.command()
def show(
    node_id: Optional[str] = typer.Argument(None, help="Record to show (default: whole forest)"),
    file: Path = FileOption,
    config: Optional[Path] = ConfigOption,
    label: str = typer.Option("name", "--label", "-l", help="Field used as node label"),
    json_output: bool = JsonOption,
):
    """Show one record or the whole forest with stored chains."""
    collection = get_collection(file, config)

    if node_id is None:
        forest = build_forest(collection.store.all(), collection.options, label_field=label)
        if json_output:
            print_json(forest_to_dict(forest))
        else:
            print_forest(forest, console, title=file.name)
        return

    node_id = resolve_id(collection, node_id)
    record = asyncio.run(collection.get(node_id))
    if record is None:
        if json_output:
            print_json({"error": "Record not found", "query": node_id})
        else:
            console.print(f"[red]Record not found: {node_id}[/red]")
        raise typer.Exit(1)
    print_record(record, collection.options, as_json=json_output)


@app.command()
def check(
    file: Path = FileOption,
    config: Optional[Path] = ConfigOption,
    json_output: bool = JsonOption,
):
    """Verify every stored chain against parent pointers."""
    collection = get_collection(file, config)
    mismatches = asyncio.run(collection.verify())
    print_mismatches(mismatches, as_json=json_output)
    if mismatches:
        raise typer.Exit(1)


# =============================================================================
# Write Commands
# =============================================================================


@app.command()
def add(
    name: str = typer.Argument(..., help="Name of the new record"),
    file: Path = FileOption,
    parent: Optional[str] = typer.Option(None, "--parent", "-p", help="Parent record id"),
    node_id: Optional[str] = typer.Option(None, "--id", help="Explicit record id"),
    config: Optional[Path] = ConfigOption,
    json_output: bool = JsonOption,
):
    """Create a record under a parent (or as a root)."""
    collection = get_collection(file, config, create=True)
    opts = collection.options
    parent = resolve_id(collection, parent)
    record = {"name": name, opts.parent_field: parent}
    if node_id is not None:
        record[opts.id_field] = node_id

    try:
        created = asyncio.run(collection.insert(record))
    except TreeAncestorsError as e:
        fail(e, json_output)

    save_collection(file, collection)
    print_record(created, opts, as_json=json_output)


@app.command()
def move(
    node_id: str = typer.Argument(..., help="Record to move"),
    file: Path = FileOption,
    parent: Optional[str] = typer.Option(None, "--parent", "-p", help="New parent id (omit to make a root)"),
    config: Optional[Path] = ConfigOption,
    json_output: bool = JsonOption,
):
    """Re-parent a record and cascade the new chain to its subtree."""
    collection = get_collection(file, config)
    opts = collection.options
    node_id = resolve_id(collection, node_id)
    parent = resolve_id(collection, parent)

    try:
        moved = asyncio.run(collection.update_one({opts.id_field: node_id}, {opts.parent_field: parent}))
    except TreeAncestorsError as e:
        fail(e, json_output)

    if moved is None:
        console.print(f"[red]Record not found: {node_id}[/red]")
        raise typer.Exit(1)

    save_collection(file, collection)
    print_record(moved, opts, as_json=json_output)


@app.command()
def remove(
    node_id: Optional[str] = typer.Argument(None, help="Record to remove"),
    file: Path = FileOption,
    where: Optional[str] = typer.Option(None, "--where", "-w", help="Bulk remove by FIELD=VALUE"),
    config: Optional[Path] = ConfigOption,
    json_output: bool = JsonOption,
):
    """Remove records that have no descendants."""
    if (node_id is None) == (where is None):
        console.print("[red]Error: Give either a record id or --where[/red]")
        raise typer.Exit(1)

    collection = get_collection(file, config)

    if node_id is not None:
        node_id = resolve_id(collection, node_id)
        try:
            removed = asyncio.run(collection.remove(node_id))
        except TreeAncestorsError as e:
            fail(e, json_output)
        if not removed:
            console.print(f"[red]Record not found: {node_id}[/red]")
            raise typer.Exit(1)
        save_collection(file, collection)
        if json_output:
            print_json({"removed": [node_id]})
        else:
            console.print(f"[green]Removed {node_id}[/green]")
        return

    try:
        result = asyncio.run(collection.remove_many(parse_where(where)))
    except TreeAncestorsError as e:
        # the sweep is best-effort: keep what was removed
        save_collection(file, collection)
        fail(e, json_output)

    save_collection(file, collection)
    print_removed(result, as_json=json_output)


@app.command()
def rebuild(
    file: Path = FileOption,
    config: Optional[Path] = ConfigOption,
    json_output: bool = JsonOption,
):
    """Recompute every chain from parent pointers."""
    collection = get_collection(file, config)

    try:
        result = asyncio.run(collection.rebuild())
    except TreeAncestorsError as e:
        fail(e, json_output)

    save_collection(file, collection)
    print_rebuild(result, as_json=json_output)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
