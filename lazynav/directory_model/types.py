"""Domain datatypes for directory listings and listing options."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

ItemKind = Literal["file", "folder"]


def canonical_path(path: str | os.PathLike[str]) -> Path:
    """Return an absolute, normalized path without touching the filesystem."""
    return Path(os.path.abspath(os.fspath(path)))


@dataclass(frozen=True, eq=False)
class DirectoryItem:
    """One immediate entry of a directory listing.

    Identity is the canonical ``path``: two items compare equal when their
    paths match, whatever the other fields say.
    """

    name: str
    path: Path
    is_dir: bool
    is_hidden: bool = False

    @property
    def kind(self) -> ItemKind:
        return "folder" if self.is_dir else "file"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DirectoryItem):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)


ItemFilter = Callable[[DirectoryItem], bool]
ItemSorter = Callable[[list[DirectoryItem]], list[DirectoryItem]]


@dataclass(frozen=True)
class ListOptions:
    """Options applied by a store when listing one directory.

    ``sort`` receives the full list and returns it ordered; ``filter`` keeps
    items for which it returns true. ``hide_hidden`` drops hidden items after
    both have run.
    """

    hide_hidden: bool = False
    filter: ItemFilter | None = None
    sort: ItemSorter | None = None


__all__ = [
    "ItemKind",
    "canonical_path",
    "DirectoryItem",
    "ItemFilter",
    "ItemSorter",
    "ListOptions",
]
