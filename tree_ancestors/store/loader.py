"""JSON snapshot utilities for tree collections.

Uses msgspec for fast, typed parsing of snapshot files.
"""

from pathlib import Path
from typing import Any, Optional

import msgspec

from .memory import InMemoryStore
from ..models import TreeOptions

SNAPSHOT_VERSION = "1.0"


class Snapshot(msgspec.Struct, omit_defaults=True):
    """Snapshot JSON specification.

    Nodes are kept as plain documents since their field names depend on
    the configured options.
    """

    version: str = SNAPSHOT_VERSION
    nodes: list[dict[str, Any]] = []


# Create reusable encoder/decoder for performance
_decoder = msgspec.json.Decoder(Snapshot)
_encoder = msgspec.json.Encoder()


def load_snapshot(path: str | Path) -> Snapshot:
    """Load a snapshot from file.

    Args:
        path: Path to the snapshot JSON file.

    Returns:
        Parsed Snapshot struct.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        msgspec.DecodeError: If the file is not valid JSON.
    """
    with open(path, "rb") as f:
        return _decoder.decode(f.read())


def dump_snapshot(path: str | Path, records: list[dict[str, Any]]) -> Path:
    """Write records to a snapshot file, replacing it."""
    path = Path(path)
    encoded = _encoder.encode(Snapshot(nodes=records))
    path.write_bytes(msgspec.json.format(encoded, indent=2))
    return path


def open_store(path: Optional[str | Path], options: TreeOptions) -> InMemoryStore:
    """Return an in-memory store seeded from a snapshot.

    A missing file yields an empty store, so a new collection can be started
    with the same path it will be saved to.
    """
    if path is None or not Path(path).exists():
        return InMemoryStore(id_field=options.id_field)
    snapshot = load_snapshot(path)
    return InMemoryStore(id_field=options.id_field, records=snapshot.nodes)
