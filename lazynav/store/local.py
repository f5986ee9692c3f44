"""Local-filesystem Directory Store backed by ``os``, ``shutil`` and ``send2trash``."""

from __future__ import annotations

import logging
import os
import shutil
import threading
from collections.abc import Callable
from pathlib import Path

from send2trash import send2trash

from ..directory_model import DirectoryItem, ItemKind, ListOptions, canonical_path, list_directory_items
from ..errors import MutationError, WatchError
from .watch import DEFAULT_POLL_SECONDS, PollingSubscription

logger = logging.getLogger(__name__)


class LocalDirectoryStore:
    """Directory Store over the local filesystem.

    Holds at most one live ``PollingSubscription``; a new ``watch`` call
    cancels whichever subscription is still active.
    """

    def __init__(
        self,
        *,
        hide_unix_style: bool = True,
        poll_seconds: float = DEFAULT_POLL_SECONDS,
    ) -> None:
        self.hide_unix_style = hide_unix_style
        self.poll_seconds = poll_seconds
        self._watch_lock = threading.Lock()
        self._subscription: PollingSubscription | None = None

    def list(self, path: Path, options: ListOptions | None = None) -> list[DirectoryItem]:
        return list_directory_items(path, options, hide_unix_style=self.hide_unix_style)

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def create(self, name: str, parent_path: Path, kind: ItemKind) -> None:
        target = canonical_path(parent_path) / name
        if kind == "folder":
            try:
                target.mkdir()
            except OSError as exc:
                raise MutationError("Could not create directory", target) from exc
            return
        try:
            with open(target, "x", encoding="utf-8"):
                pass
        except OSError as exc:
            raise MutationError("Could not create file", target) from exc

    def rename(self, old_name: str, new_name: str, parent_path: Path) -> None:
        if old_name == new_name:
            return
        parent = canonical_path(parent_path)
        source = parent / old_name
        destination = parent / new_name
        if os.path.lexists(destination):
            raise MutationError("Could not rename item, destination exists", source, destination)
        try:
            os.rename(source, destination)
        except OSError as exc:
            raise MutationError("Could not rename item", source, destination) from exc

    def delete_item(self, path: Path, kind: ItemKind) -> None:
        path = canonical_path(path)
        try:
            if kind == "folder" and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as exc:
            label = "Cannot remove folder" if kind == "folder" else "Cannot remove file"
            raise MutationError(label, path) from exc

    def trash(self, path: Path) -> None:
        path = canonical_path(path)
        try:
            send2trash(os.fspath(path))
        except OSError as exc:
            raise MutationError("Could not send item to trash", path) from exc

    def copy(self, path: Path, dest_dir: Path) -> None:
        source = canonical_path(path)
        destination = canonical_path(dest_dir) / source.name
        if os.path.lexists(destination):
            raise MutationError("Failed to copy item, destination exists", source, destination)
        try:
            if source.is_dir() and not source.is_symlink():
                shutil.copytree(source, destination, symlinks=True)
            else:
                shutil.copy2(source, destination, follow_symlinks=False)
        except (OSError, shutil.Error) as exc:
            raise MutationError("Failed to copy item", source, destination) from exc

    def move(self, path: Path, dest_dir: Path, kind: ItemKind) -> None:
        """Copy ``path`` into ``dest_dir`` and only then delete the source."""
        source = canonical_path(path)
        destination = canonical_path(dest_dir) / source.name
        try:
            self.copy(source, dest_dir)
        except MutationError as exc:
            raise MutationError("Failed to move item", source, destination) from exc
        try:
            self.delete_item(source, kind)
        except MutationError as exc:
            raise MutationError("Moved item but could not remove source", source, destination) from exc

    def watch(self, path: Path, on_change: Callable[[], None]) -> PollingSubscription:
        path = canonical_path(path)
        with self._watch_lock:
            if self._subscription is not None and self._subscription.active:
                self._subscription.cancel()
            try:
                subscription = PollingSubscription(path, on_change, poll_seconds=self.poll_seconds)
            except WatchError:
                self._subscription = None
                raise
            except OSError as exc:
                self._subscription = None
                raise WatchError(path, exc.strerror or "subscription failed") from exc
            self._subscription = subscription
        logger.debug("Watching %s every %.2fs", path, self.poll_seconds)
        return subscription


__all__ = ["LocalDirectoryStore"]
