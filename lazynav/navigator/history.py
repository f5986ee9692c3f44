"""Per-path memory of the last view shown for a directory.

This module intentionally has no UI concerns. The caller writes an entry when
it leaves a directory and consumes it when it comes back, restoring the exact
listing and selection without touching the disk.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ..directory_model import DirectoryItem, canonical_path


@dataclass(frozen=True)
class HistoryCacheEntry:
    """Listing and selection of one directory at the moment it was left."""

    path: Path
    selected_index: int
    entries: tuple[DirectoryItem, ...]

    @classmethod
    def capture(cls, path: Path, selected_index: int, entries: Sequence[DirectoryItem]) -> HistoryCacheEntry:
        """Build a normalized entry with the selection clamped into range."""
        items = tuple(entries)
        upper = max(0, len(items) - 1)
        return cls(
            path=canonical_path(path),
            selected_index=max(0, min(selected_index, upper)),
            entries=items,
        )


class NavigationHistoryCache:
    """One live ``HistoryCacheEntry`` per path, overwritten on each write."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[Path, HistoryCacheEntry] = {}

    def cache(self, entry: HistoryCacheEntry) -> None:
        with self._lock:
            self._entries[canonical_path(entry.path)] = entry

    def pop_if_present(self, path: Path) -> HistoryCacheEntry | None:
        """Remove and return the entry for ``path``; absence is a normal outcome."""
        with self._lock:
            return self._entries.pop(canonical_path(path), None)

    def discard(self, path: Path) -> None:
        with self._lock:
            self._entries.pop(canonical_path(path), None)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, Path):
            return False
        with self._lock:
            return canonical_path(path) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["HistoryCacheEntry", "NavigationHistoryCache"]
