"""Per-path memoized listing handles populated in the background."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path

from ..directory_model import DirectoryItem, canonical_path

logger = logging.getLogger(__name__)

DEFAULT_PREFETCH_WORKERS = 4


class PrefetchCache:
    """Arena of child-list handles keyed by canonical path.

    A path maps to at most one handle, pending or resolved. ``get`` reuses a
    live handle and otherwise starts one listing on the executor. Failed
    listings are dropped from the arena as soon as they complete so the next
    ``get`` retries. Handles are only ever replaced or removed, never
    mutated.
    """

    def __init__(
        self,
        list_directory: Callable[[Path], list[DirectoryItem]],
        executor: Executor | None = None,
        *,
        max_workers: int = DEFAULT_PREFETCH_WORKERS,
    ) -> None:
        self._list_directory = list_directory
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="lazynav-prefetch",
        )
        self._lock = threading.Lock()
        self._handles: dict[Path, Future] = {}

    def get(self, path: Path) -> Future:
        """Return the live handle for ``path``, starting a listing if absent."""
        path = canonical_path(path)
        with self._lock:
            handle = self._handles.get(path)
            if handle is not None:
                return handle
            handle = Future()
            self._handles[path] = handle
        try:
            self._executor.submit(self._resolve, path, handle)
        except RuntimeError:
            self._forget(path, handle)
            raise
        return handle

    def peek(self, path: Path) -> Future | None:
        with self._lock:
            return self._handles.get(canonical_path(path))

    def resolved(self, path: Path) -> list[DirectoryItem] | None:
        """Return the listing for ``path`` if its handle already succeeded."""
        handle = self.peek(path)
        if handle is None or not handle.done() or handle.cancelled():
            return None
        if handle.exception() is not None:
            return None
        return list(handle.result())

    def prime(self, path: Path, items: list[DirectoryItem]) -> Future:
        """Store an already-resolved handle for ``path``, replacing any other."""
        handle: Future = Future()
        handle.set_result(list(items))
        with self._lock:
            self._handles[canonical_path(path)] = handle
        return handle

    def adopt(self, path: Path, handle: Future) -> Future:
        """Put a handle held elsewhere back into the arena.

        A live handle already stored for ``path`` wins. Cancelled or failed
        handles are never adopted; a fresh listing starts instead.
        """
        if handle.cancelled() or (handle.done() and handle.exception() is not None):
            return self.get(path)
        path = canonical_path(path)
        with self._lock:
            return self._handles.setdefault(path, handle)

    def invalidate(self, path: Path) -> bool:
        with self._lock:
            return self._handles.pop(canonical_path(path), None) is not None

    def retain(self, paths: Iterable[Path]) -> int:
        """Drop every handle whose path is not in ``paths``; return how many went."""
        keep = {canonical_path(path) for path in paths}
        with self._lock:
            stale = [path for path in self._handles if path not in keep]
            for path in stale:
                del self._handles[path]
        if stale:
            logger.debug("Dropped %d prefetch handle(s)", len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._handles.clear()

    def handles(self) -> list[Future]:
        with self._lock:
            return list(self._handles.values())

    def paths(self) -> set[Path]:
        with self._lock:
            return set(self._handles)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, Path):
            return False
        with self._lock:
            return canonical_path(path) in self._handles

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    def shutdown(self) -> None:
        with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()
        for handle in handles:
            handle.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def _resolve(self, path: Path, handle: Future) -> None:
        if not handle.set_running_or_notify_cancel():
            return
        # A failed handle leaves the arena before it completes.
        try:
            items = self._list_directory(path)
        except Exception as exc:
            logger.warning("Could not list children of %s: %s", path, exc)
            self._forget(path, handle)
            handle.set_exception(exc)
            return
        handle.set_result(items)

    def _forget(self, path: Path, handle: Future) -> None:
        with self._lock:
            if self._handles.get(path) is handle:
                del self._handles[path]


__all__ = ["DEFAULT_PREFETCH_WORKERS", "PrefetchCache"]
