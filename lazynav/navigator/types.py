"""Cursor datatypes exposed by the Navigator."""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path

from ..directory_model import DirectoryItem

ChildListHandle = Future  # Future[list[DirectoryItem]]


@dataclass(frozen=True, eq=False)
class NavigatorEntry(DirectoryItem):
    """Directory item plus an optional handle on its own child listing.

    Entries are rebuilt rather than mutated when a handle is attached.
    """

    child_items: ChildListHandle | None = field(default=None, repr=False)

    @classmethod
    def from_item(cls, item: DirectoryItem, child_items: ChildListHandle | None = None) -> NavigatorEntry:
        if isinstance(item, NavigatorEntry) and child_items is None:
            return item
        return cls(
            name=item.name,
            path=item.path,
            is_dir=item.is_dir,
            is_hidden=item.is_hidden,
            child_items=child_items,
        )

    def resolved_children(self) -> list[DirectoryItem] | None:
        """Return the child listing if the handle finished successfully."""
        handle = self.child_items
        if handle is None or not handle.done() or handle.cancelled():
            return None
        if handle.exception() is not None:
            return None
        return list(handle.result())


def as_entries(items: Iterable[DirectoryItem]) -> tuple[NavigatorEntry, ...]:
    return tuple(NavigatorEntry.from_item(item) for item in items)


def as_items(items: Iterable[DirectoryItem]) -> list[DirectoryItem]:
    """Copy a listing as plain items, dropping any child-list handles."""
    return [
        DirectoryItem(name=item.name, path=item.path, is_dir=item.is_dir, is_hidden=item.is_hidden)
        for item in items
    ]


@dataclass(frozen=True)
class Cursor:
    """Committed view of current directory plus its parent.

    ``parent_path`` is ``None`` only at a filesystem root. ``parent_entries``
    is ``None`` while the parent listing is still being fetched.
    """

    current_path: Path
    current_entries: tuple[NavigatorEntry, ...]
    parent_path: Path | None
    parent_entries: tuple[NavigatorEntry, ...] | None
    generation: int = 0

    def entry_for(self, path: Path) -> NavigatorEntry | None:
        for entry in self.current_entries:
            if entry.path == path:
                return entry
        return None

    def directory_paths(self) -> list[Path]:
        return [entry.path for entry in self.current_entries if entry.is_dir]


__all__ = [
    "ChildListHandle",
    "NavigatorEntry",
    "as_entries",
    "as_items",
    "Cursor",
]
