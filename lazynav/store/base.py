"""Directory Store capability consumed by the navigation engine."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from ..directory_model import DirectoryItem, ItemKind, ListOptions


class Subscription(Protocol):
    """Handle for one live change-notification watch."""

    path: Path

    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class DirectoryStore(Protocol):
    """Raw filesystem operations the engine delegates to.

    Implementations translate I/O failures into ``ListError``,
    ``MutationError`` and ``WatchError``. Only one watch is live at a time:
    establishing a new one may cancel the previous subscription.
    """

    def list(self, path: Path, options: ListOptions | None = None) -> list[DirectoryItem]: ...

    def exists(self, path: Path) -> bool: ...

    def create(self, name: str, parent_path: Path, kind: ItemKind) -> None: ...

    def rename(self, old_name: str, new_name: str, parent_path: Path) -> None: ...

    def delete_item(self, path: Path, kind: ItemKind) -> None: ...

    def trash(self, path: Path) -> None: ...

    def copy(self, path: Path, dest_dir: Path) -> None: ...

    def move(self, path: Path, dest_dir: Path, kind: ItemKind) -> None: ...

    def watch(self, path: Path, on_change: Callable[[], None]) -> Subscription: ...


__all__ = ["DirectoryStore", "Subscription"]
