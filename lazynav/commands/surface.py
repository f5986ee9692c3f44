"""Clipboard and mutation verbs translated into Directory Store calls.

Batch verbs (paste, delete, trash) are best effort: every item is attempted,
successes are kept, and failures come back together as one
``BatchMutationError``. Mutations touching the same path are serialized.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ..directory_model import DirectoryItem, ItemKind, canonical_path
from ..errors import BatchMutationError, ClipboardEmptyError, ListError, MutationError
from ..navigator import Navigator
from ..store.base import DirectoryStore
from .sequencing import PathSequencer

logger = logging.getLogger(__name__)

ClipboardAction = Literal["copy", "cut"]
DEFAULT_COMMAND_WORKERS = 4


@dataclass(frozen=True)
class ClipboardState:
    """Items plus the action to apply on paste; ``action is None`` means empty."""

    items: tuple[DirectoryItem, ...] = ()
    action: ClipboardAction | None = None

    @property
    def is_empty(self) -> bool:
        return self.action is None


EMPTY_CLIPBOARD = ClipboardState()


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


class CommandSurface:
    """Copy/cut/paste, delete, trash, create and rename over a store.

    When a ``Navigator`` is attached, directories whose contents changed are
    refreshed (current directory) or invalidated (children, parent) after
    each verb.
    """

    def __init__(
        self,
        store: DirectoryStore,
        navigator: Navigator | None = None,
        *,
        executor: Executor | None = None,
        max_workers: int = DEFAULT_COMMAND_WORKERS,
    ) -> None:
        self._store = store
        self.navigator = navigator
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="lazynav-command",
        )
        self._clipboard_lock = threading.Lock()
        self._clipboard = EMPTY_CLIPBOARD
        self.sequencer = PathSequencer()

    # clipboard
    @property
    def clipboard(self) -> ClipboardState:
        return self._clipboard

    def set_clipboard(self, items: Sequence[DirectoryItem], action: ClipboardAction) -> ClipboardState:
        """Replace the clipboard wholesale; prior contents are never merged."""
        if action not in ("copy", "cut"):
            raise ValueError(f"unknown clipboard action: {action!r}")
        if not items:
            raise ValueError("clipboard items must not be empty")
        state = ClipboardState(items=tuple(items), action=action)
        with self._clipboard_lock:
            self._clipboard = state
        return state

    def clear_clipboard(self) -> None:
        with self._clipboard_lock:
            self._clipboard = EMPTY_CLIPBOARD

    def paste(self, destination: Path) -> list[DirectoryItem]:
        """Apply the clipboard action into ``destination``.

        ``copy`` leaves sources alone and keeps the clipboard; ``cut`` moves
        every item and empties the clipboard only if all of them succeeded.
        Raises ``ClipboardEmptyError`` without touching the store when no
        action is set, and ``BatchMutationError`` for any failed item.
        """
        state = self._clipboard
        if state.is_empty:
            raise ClipboardEmptyError()
        destination = canonical_path(destination)
        verb = "copy" if state.action == "copy" else "move"
        logger.info(
            "Requesting to %s %s to %s",
            verb,
            ", ".join(str(item.path) for item in state.items),
            destination,
        )

        def paste_one(item: DirectoryItem) -> None:
            target = destination / item.name
            if item.is_dir and _is_within(destination, item.path):
                raise MutationError("Cannot paste a folder into itself", item.path, target)
            with self.sequencer.hold(item.path, target):
                if state.action == "copy":
                    self._store.copy(item.path, destination)
                else:
                    self._store.move(item.path, destination, item.kind)

        def settle(done: list[DirectoryItem]) -> None:
            changed = {destination}
            if state.action == "cut":
                changed.update(item.path.parent for item in done)
            self._after_mutation(changed, removed=[item.path for item in done if item.is_dir and state.action == "cut"])

        done, failures = self._run_batch(state.items, paste_one, settle)
        if failures:
            raise BatchMutationError(failures)
        if state.action == "cut":
            with self._clipboard_lock:
                if self._clipboard is state:
                    self._clipboard = EMPTY_CLIPBOARD
        return done

    # deletion
    def delete_items(self, items: Sequence[DirectoryItem]) -> list[DirectoryItem]:
        """Permanently delete every item; confirmation is the caller's job."""
        logger.info("Requesting to delete %s", ", ".join(str(item.path) for item in items))

        def delete_one(item: DirectoryItem) -> None:
            with self.sequencer.hold(item.path):
                self._store.delete_item(item.path, item.kind)

        return self._remove_batch(items, delete_one)

    def trash_items(self, items: Sequence[DirectoryItem]) -> list[DirectoryItem]:
        """Send every item to the platform trash."""
        logger.info("Requesting to trash %s", ", ".join(str(item.path) for item in items))

        def trash_one(item: DirectoryItem) -> None:
            with self.sequencer.hold(item.path):
                self._store.trash(item.path)

        return self._remove_batch(items, trash_one)

    # single-item verbs
    def create_item(self, name: str | None, parent_path: Path, kind: ItemKind | None) -> bool:
        """Create ``name`` under ``parent_path``; a missing name or kind is a no-op."""
        if not name or not kind:
            return False
        parent_path = canonical_path(parent_path)
        logger.info("Requesting to create %s called %s at %s", kind, name, parent_path)
        with self.sequencer.hold(parent_path / name):
            self._store.create(name, parent_path, kind)
        self._after_mutation({parent_path})
        return True

    def rename_item(self, old_name: str | None, new_name: str | None, parent_path: Path) -> bool:
        """Rename within ``parent_path``; missing names are a no-op."""
        if not old_name or not new_name:
            return False
        if old_name == new_name:
            return False
        parent_path = canonical_path(parent_path)
        source = parent_path / old_name
        logger.info("Requesting to rename %s to %s", source, new_name)
        with self.sequencer.hold(source, parent_path / new_name):
            self._store.rename(old_name, new_name, parent_path)
        self._after_mutation({parent_path}, removed=[source])
        return True

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    # internals
    def _remove_batch(
        self,
        items: Sequence[DirectoryItem],
        remove_one: Callable[[DirectoryItem], None],
    ) -> list[DirectoryItem]:
        def settle(done: list[DirectoryItem]) -> None:
            self._after_mutation(
                {item.path.parent for item in done},
                removed=[item.path for item in done if item.is_dir],
            )

        done, failures = self._run_batch(items, remove_one, settle)
        if failures:
            raise BatchMutationError(failures)
        return done

    def _run_batch(
        self,
        items: Iterable[DirectoryItem],
        operation: Callable[[DirectoryItem], None],
        settle: Callable[[list[DirectoryItem]], None],
    ) -> tuple[list[DirectoryItem], list[MutationError]]:
        """Run ``operation`` for every item concurrently; collect failures in order.

        ``settle`` receives the items that succeeded before any error leaves
        this method, so caches follow the disk even when an item raised
        something other than ``MutationError``.
        """
        submitted = [(item, self._executor.submit(operation, item)) for item in items]
        done: list[DirectoryItem] = []
        failures: list[MutationError] = []
        unexpected: BaseException | None = None
        for item, future in submitted:
            try:
                future.result()
            except MutationError as exc:
                logger.warning("%s", exc)
                failures.append(exc)
            except Exception as exc:
                if unexpected is None:
                    unexpected = exc
            else:
                done.append(item)
        settle(done)
        if unexpected is not None:
            raise unexpected
        return done, failures

    def _after_mutation(self, changed_dirs: set[Path], removed: Iterable[Path] = ()) -> None:
        navigator = self.navigator
        if navigator is None:
            return
        current_path = navigator.current_cursor().current_path
        stale = set(changed_dirs) | set(removed)
        if current_path in stale:
            stale.discard(current_path)
            try:
                navigator.refresh_current()
            except ListError as exc:
                logger.warning("Could not refresh %s after mutation: %s", current_path, exc)
        if stale:
            navigator.invalidate(*stale)


__all__ = [
    "ClipboardAction",
    "ClipboardState",
    "EMPTY_CLIPBOARD",
    "DEFAULT_COMMAND_WORKERS",
    "CommandSurface",
]
