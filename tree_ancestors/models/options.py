"""Engine configuration."""

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import msgspec


@dataclass(frozen=True)
class TreeOptions:
    """Field names and limits shared by every engine component.

    Passed explicitly to each component; there is no global configuration.
    """

    parent_field: str = "parent"
    id_field: str = "_id"  # field the parent reference points at
    ancestors_field: str = "ancestors"
    generate_indexes: bool = False
    concurrency: int = 5  # max in-flight store tasks for batch operations

    def __post_init__(self):
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        names = {self.parent_field, self.id_field, self.ancestors_field}
        if len(names) != 3:
            raise ValueError("parent, id and ancestors fields must be distinct")

    def replace(self, **changes) -> "TreeOptions":
        """Return a copy with the given options changed."""
        return dataclasses.replace(self, **changes)


class OptionsSpec(msgspec.Struct, forbid_unknown_fields=True, omit_defaults=True):
    """Options file specification (JSON)."""

    parent_field: Optional[str] = None
    id_field: Optional[str] = None
    ancestors_field: Optional[str] = None
    generate_indexes: Optional[bool] = None
    concurrency: Optional[int] = None


_decoder = msgspec.json.Decoder(OptionsSpec)


def load_options(path: str | Path, base: Optional[TreeOptions] = None) -> TreeOptions:
    """Load options from a JSON file.

    Keys missing from the file keep the values of ``base`` (or the defaults).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        msgspec.ValidationError: If the file has unknown keys or wrong types.
    """
    with open(path, "rb") as f:
        spec = _decoder.decode(f.read())

    changes = {
        name: value
        for name, value in msgspec.structs.asdict(spec).items()
        if value is not None
    }
    return (base or TreeOptions()).replace(**changes)
