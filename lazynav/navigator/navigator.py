"""Cursor orchestration over a Directory Store and a prefetch arena.

The Navigator owns one ``Cursor`` (current directory, its entries, its parent
and the parent's entries) and three ways of moving it: into a child, up to
the parent, or to an arbitrary path. Every move runs inside a per-navigator
lane so moves never interleave. After each move the child directories of the
new current directory get background listing handles, which makes the next
``to_child`` free of I/O once they resolve.

Background completions are gated by a navigation generation counter: a
parent listing that finishes after the cursor has moved on is dropped.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent import futures
from concurrent.futures import Executor, Future
from dataclasses import replace
from functools import partial
from pathlib import Path

from ..directory_model import DirectoryItem, ListOptions, canonical_path
from ..errors import ListError, ListFailedError, NoParentError, NotFoundError
from ..store.base import DirectoryStore, Subscription
from .prefetch import DEFAULT_PREFETCH_WORKERS, PrefetchCache
from .types import Cursor, NavigatorEntry, as_entries, as_items

logger = logging.getLogger(__name__)

CursorListener = Callable[[Cursor], None]


class Navigator:
    """Single logical cursor over a hierarchical filesystem."""

    def __init__(
        self,
        initial_path: Path,
        store: DirectoryStore,
        *,
        options: ListOptions | None = None,
        executor: Executor | None = None,
        max_workers: int = DEFAULT_PREFETCH_WORKERS,
    ) -> None:
        """List ``initial_path`` and establish the first cursor.

        Raises ``ListFailedError`` when the initial directory cannot be listed.
        Change notifications start with ``start_watching``.
        """
        self._store = store
        self._options = options or ListOptions()
        self._lane = threading.RLock()
        self._commit_lock = threading.Lock()
        self._idle = threading.Condition()
        self._pending_commits = 0
        self._generation = 0
        self._watching = False
        self._subscription: Subscription | None = None
        self._listeners: list[CursorListener] = []
        self.prefetch = PrefetchCache(self._list_for_prefetch, executor, max_workers=max_workers)

        path = canonical_path(initial_path)
        with self._lane:
            items = self._list_for_navigation(path)
            parent_path = self._parent_path_of(path)
            self._cursor = Cursor(path, (), parent_path, None, 0)
            self._commit_move(path, items, parent_path, None)

    @property
    def options(self) -> ListOptions:
        return self._options

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def subscription(self) -> Subscription | None:
        return self._subscription

    def current_cursor(self) -> Cursor:
        """Return the last committed cursor without doing any I/O."""
        return self._cursor

    # listeners
    def add_listener(self, listener: CursorListener) -> Callable[[], None]:
        """Call ``listener`` with every newly committed cursor; return a remover."""
        with self._commit_lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._commit_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def _notify(self, cursor: Cursor) -> None:
        with self._commit_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(cursor)
            except Exception:
                logger.exception("Cursor listener failed")

    # navigation
    def to_child(self, child_path: Path) -> Cursor:
        """Move into ``child_path``, a directory entry of the current cursor.

        A resolved prefetch handle is promoted without I/O; otherwise the child
        is listed directly. Raises ``NotFoundError`` when the path is not a
        directory entry and ``ListFailedError`` when the direct listing fails.
        """
        child_path = canonical_path(child_path)
        with self._lane:
            cursor = self._cursor
            entry = cursor.entry_for(child_path)
            if entry is None or not entry.is_dir:
                raise NotFoundError(child_path)
            items = entry.resolved_children()
            if items is None:
                logger.debug("No prefetched listing for %s, listing directly", child_path)
                items = self._list_for_navigation(child_path)
            else:
                logger.debug("Promoted prefetched listing for %s", child_path)
            return self._commit_move(child_path, items, cursor.current_path, cursor.current_entries)

    def to_parent(self) -> Cursor:
        """Move up, promoting the tracked parent entries as the new listing.

        Raises ``NoParentError`` at a filesystem root. When the parent listing
        is still in flight this waits for it rather than listing again.
        """
        with self._lane:
            cursor = self._cursor
            if cursor.parent_path is None:
                raise NoParentError(cursor.current_path)
            parent_path = cursor.parent_path
            parent_entries: Iterable[DirectoryItem] | None = cursor.parent_entries
            if parent_entries is None:
                parent_entries = self._await_listing(parent_path)
            grandparent_path = self._parent_path_of(parent_path)
            grandparent_items = self.prefetch.resolved(grandparent_path) if grandparent_path is not None else None
            return self._commit_move(parent_path, parent_entries, grandparent_path, grandparent_items)

    def to_path(self, target_path: Path) -> Cursor:
        """Jump to ``target_path`` using the cheapest route available.

        Same path is a no-op returning the identical cursor. The parent and
        current directory entries dispatch to ``to_parent``/``to_child``;
        anything else is listed fresh. Raises ``ListFailedError`` when the
        target cannot be listed.
        """
        target = canonical_path(target_path)
        with self._lane:
            cursor = self._cursor
            if target == cursor.current_path:
                return cursor
            if target == cursor.parent_path:
                return self.to_parent()
            entry = cursor.entry_for(target)
            if entry is not None and entry.is_dir:
                return self.to_child(target)
            items = self._list_for_navigation(target)
            parent_path = self._parent_path_of(target)
            parent_items = self.prefetch.resolved(parent_path) if parent_path is not None else None
            return self._commit_move(target, items, parent_path, parent_items)

    def refresh_current(self) -> Cursor:
        """Re-list the current directory and replace only its entries.

        Raises ``ListError`` when the directory can no longer be listed; the
        cursor is left untouched in that case.
        """
        with self._lane:
            path = self._cursor.current_path
            self.prefetch.invalidate(path)
            items = self._store.list(path, self._options)
            entries = self._reprime_children(items)
            with self._commit_lock:
                cursor = replace(self._cursor, current_entries=entries)
                self._cursor = cursor
            self.prefetch.prime(path, items)
            self._retain_prefetch(cursor)
            logger.debug("Refreshed %s (%d entries)", path, len(entries))
        self._notify(cursor)
        return cursor

    def invalidate(self, *paths: Path) -> None:
        """Forget cached listings for ``paths`` after their contents changed.

        A current-directory child gets a fresh handle, a sibling held in the
        parent entries drops its handle, and the parent directory has its
        entries re-fetched in the background. The current directory
        itself is handled by ``refresh_current``.
        """
        with self._lane:
            changed = False
            cursor = self._cursor
            targets = {canonical_path(path) for path in paths}
            for path in targets:
                self.prefetch.invalidate(path)
            if targets & set(cursor.directory_paths()):
                entries = tuple(
                    NavigatorEntry.from_item(entry, self.prefetch.get(entry.path)) if entry.path in targets else entry
                    for entry in cursor.current_entries
                )
                cursor = replace(cursor, current_entries=entries)
                changed = True
            if cursor.parent_path is not None and cursor.parent_path in targets:
                cursor = replace(cursor, parent_entries=None)
                changed = True
            elif cursor.parent_entries is not None and any(
                entry.path in targets and entry.child_items is not None for entry in cursor.parent_entries
            ):
                # Siblings keep their handles for to_parent; changed ones lose them.
                parent_entries = tuple(
                    NavigatorEntry.from_item(as_items([entry])[0]) if entry.path in targets else entry
                    for entry in cursor.parent_entries
                )
                cursor = replace(cursor, parent_entries=parent_entries)
                changed = True
            if not changed:
                return
            with self._commit_lock:
                self._cursor = cursor
            if cursor.parent_entries is None and cursor.parent_path is not None:
                self._fetch_parent_in_background(cursor.generation, cursor.parent_path)
        self._notify(cursor)

    # watching
    def start_watching(self) -> Subscription:
        """Subscribe to changes of the current directory.

        Every later move re-subscribes to the new current directory. Raises
        ``WatchError`` when the subscription cannot be established.
        """
        with self._lane:
            self._watching = True
            subscription = self._subscription
            if subscription is not None and subscription.active and subscription.path == self._cursor.current_path:
                return subscription
            return self._resubscribe(self._cursor.current_path)

    def stop_watching(self) -> None:
        with self._lane:
            self._watching = False
            subscription = self._subscription
            self._subscription = None
            if subscription is not None:
                subscription.cancel()

    def _resubscribe(self, path: Path) -> Subscription:
        previous = self._subscription
        self._subscription = None
        if previous is not None:
            previous.cancel()
        subscription = self._store.watch(path, partial(self._on_watch_event, path))
        self._subscription = subscription
        return subscription

    def _on_watch_event(self, path: Path) -> None:
        with self._lane:
            if not self._watching or self._cursor.current_path != path:
                logger.debug("Dropped change notification for abandoned path %s", path)
                return
            try:
                self.refresh_current()
            except ListError as exc:
                logger.warning("Could not refresh %s: %s", path, exc)

    # lifecycle
    def wait_for_prefetch(self, timeout: float | None = None) -> bool:
        """Block until background listings and their cursor writes settle."""
        _done, not_done = futures.wait(self.prefetch.handles(), timeout=timeout)
        with self._idle:
            settled = self._idle.wait_for(lambda: self._pending_commits == 0, timeout=timeout)
        return settled and not not_done

    def close(self) -> None:
        self.stop_watching()
        self.prefetch.shutdown()

    # internals
    def _list_for_prefetch(self, path: Path) -> list[DirectoryItem]:
        return self._store.list(path, self._options)

    def _list_for_navigation(self, path: Path) -> list[DirectoryItem]:
        try:
            return self._store.list(path, self._options)
        except ListError as exc:
            raise ListFailedError(path, exc) from exc

    def _await_listing(self, path: Path) -> list[DirectoryItem]:
        handle = self.prefetch.get(path)
        try:
            return list(handle.result())
        except ListError as exc:
            raise ListFailedError(path, exc) from exc

    def _parent_path_of(self, path: Path) -> Path | None:
        parent = path.parent
        if parent == path:
            return None
        return parent if self._store.exists(parent) else None

    def _reprime_children(self, items: Iterable[DirectoryItem]) -> tuple[NavigatorEntry, ...]:
        entries: list[NavigatorEntry] = []
        for item in items:
            carried = item.child_items if isinstance(item, NavigatorEntry) else None
            if item.is_dir and carried is not None:
                entries.append(NavigatorEntry.from_item(item, self.prefetch.adopt(item.path, carried)))
            elif item.is_dir:
                entries.append(NavigatorEntry.from_item(item, self.prefetch.get(item.path)))
            else:
                entries.append(NavigatorEntry.from_item(item))
        return tuple(entries)

    def _retain_prefetch(self, cursor: Cursor) -> None:
        keep = [cursor.current_path, *cursor.directory_paths()]
        if cursor.parent_path is not None:
            keep.append(cursor.parent_path)
        self.prefetch.retain(keep)

    def _commit_move(
        self,
        current_path: Path,
        items: Iterable[DirectoryItem],
        parent_path: Path | None,
        parent_items: Iterable[DirectoryItem] | None,
    ) -> Cursor:
        items = list(items)
        path_changed = current_path != self._cursor.current_path
        entries = self._reprime_children(items)
        parent_entries = as_entries(parent_items) if parent_items is not None else None
        with self._commit_lock:
            self._generation += 1
            cursor = Cursor(current_path, entries, parent_path, parent_entries, self._generation)
            self._cursor = cursor
        self.prefetch.prime(current_path, as_items(items))
        if parent_path is not None and parent_entries is not None:
            self.prefetch.prime(parent_path, as_items(parent_entries))
        self._retain_prefetch(cursor)
        if parent_path is not None and parent_entries is None:
            self._fetch_parent_in_background(cursor.generation, parent_path)
        logger.debug("Moved to %s (generation %d)", current_path, cursor.generation)
        self._notify(cursor)
        if self._watching and (path_changed or self._subscription is None):
            self._resubscribe(current_path)
        return cursor

    def _fetch_parent_in_background(self, generation: int, parent_path: Path) -> None:
        handle = self.prefetch.get(parent_path)
        with self._idle:
            self._pending_commits += 1
        handle.add_done_callback(partial(self._on_parent_listed, generation, parent_path))

    def _on_parent_listed(self, generation: int, parent_path: Path, handle: Future) -> None:
        try:
            if handle.cancelled() or handle.exception() is not None:
                return
            parent_entries = as_entries(handle.result())
            with self._commit_lock:
                cursor = self._cursor
                if self._generation != generation or cursor.parent_path != parent_path:
                    logger.debug("Discarded stale listing of %s (generation %d)", parent_path, generation)
                    return
                cursor = replace(cursor, parent_entries=parent_entries)
                self._cursor = cursor
            self._notify(cursor)
        finally:
            with self._idle:
                self._pending_commits -= 1
                self._idle.notify_all()


__all__ = ["CursorListener", "Navigator"]
