"""Navigation engine: cursor, prefetch arena and history cache."""

from __future__ import annotations

from .types import ChildListHandle, Cursor, NavigatorEntry, as_entries, as_items
from .prefetch import DEFAULT_PREFETCH_WORKERS, PrefetchCache
from .history import HistoryCacheEntry, NavigationHistoryCache
from .navigator import CursorListener, Navigator

__all__ = [
    "ChildListHandle",
    "Cursor",
    "NavigatorEntry",
    "as_entries",
    "as_items",
    "DEFAULT_PREFETCH_WORKERS",
    "PrefetchCache",
    "HistoryCacheEntry",
    "NavigationHistoryCache",
    "CursorListener",
    "Navigator",
]
