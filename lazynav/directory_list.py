"""Caller-side controller for one directory list pane.

Owns the view state the engine leaves to its callers: selection, chosen
items, the hidden-items toggle, type-ahead search and status counters. It
consults the history cache on every arrival so returning to a directory
restores the exact listing and selection it was left with.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .commands import CommandSurface
from .directory_model import DirectoryItem, ItemKind, canonical_path
from .errors import BatchMutationError, WatchError
from .navigator import Cursor, HistoryCacheEntry, NavigationHistoryCache, Navigator

logger = logging.getLogger(__name__)

TYPE_AHEAD_RESET_SECONDS = 1.0

Direction = Literal["up", "down"]
ScrollTarget = Literal["top", "bottom"]


class TypeAheadFinder:
    """Accumulate quickly-typed characters into a name-prefix search."""

    def __init__(
        self,
        *,
        monotonic: Callable[[], float] = time.monotonic,
        reset_seconds: float = TYPE_AHEAD_RESET_SECONDS,
    ) -> None:
        self._monotonic = monotonic
        self._reset_seconds = reset_seconds
        self._term = ""
        self._last_key_at: float | None = None

    @property
    def term(self) -> str:
        return self._term

    def reset(self) -> None:
        self._term = ""
        self._last_key_at = None

    def add_char_and_search(self, char: str, items: Sequence[DirectoryItem]) -> int:
        """Return the index of the first item starting with the term, or -1."""
        now = self._monotonic()
        if self._last_key_at is None or now - self._last_key_at > self._reset_seconds:
            self._term = ""
        self._last_key_at = now
        self._term += char.casefold()
        for idx, item in enumerate(items):
            if item.name.casefold().startswith(self._term):
                return idx
        return -1


@dataclass
class ListViewState:
    path: Path
    items: list[DirectoryItem]
    selected_idx: int = 0
    chosen: list[DirectoryItem] = field(default_factory=list)
    show_hidden: bool = False


@dataclass(frozen=True)
class StatusSummary:
    item_count: int
    chosen_count: int


class DirectoryListController:
    """Drive a Navigator and a CommandSurface from list-pane gestures."""

    def __init__(
        self,
        navigator: Navigator,
        commands: CommandSurface,
        history: NavigationHistoryCache | None = None,
        *,
        show_hidden: bool = False,
        notify: Callable[[str], None] | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.navigator = navigator
        self.commands = commands
        self.history = history if history is not None else NavigationHistoryCache()
        self.notify = notify
        self.finder = TypeAheadFinder(monotonic=monotonic)
        cursor = navigator.current_cursor()
        self.state = ListViewState(
            path=cursor.current_path,
            items=list(cursor.current_entries),
            show_hidden=show_hidden,
        )

    # view
    @property
    def visible_items(self) -> list[DirectoryItem]:
        return [item for item in self.state.items if self.state.show_hidden or not item.is_hidden]

    @property
    def selected_item(self) -> DirectoryItem | None:
        visible = self.visible_items
        if 0 <= self.state.selected_idx < len(visible):
            return visible[self.state.selected_idx]
        return None

    @property
    def selected_items(self) -> list[DirectoryItem]:
        """Chosen items when any are chosen, else the item under the selection."""
        if self.state.chosen:
            return list(self.state.chosen)
        selected = self.selected_item
        return [selected] if selected is not None else []

    def status_summary(self) -> StatusSummary:
        return StatusSummary(item_count=len(self.visible_items), chosen_count=len(self.state.chosen))

    def move(self, direction: Direction) -> None:
        if direction == "up":
            if self.state.selected_idx > 0:
                self.state.selected_idx -= 1
        elif self.state.selected_idx < len(self.visible_items) - 1:
            self.state.selected_idx += 1

    def scroll_to(self, target: ScrollTarget) -> None:
        if target == "top":
            self.state.selected_idx = 0
        else:
            self.state.selected_idx = max(0, len(self.visible_items) - 1)

    def select(self, item: DirectoryItem) -> bool:
        visible = self.visible_items
        if item not in visible:
            return False
        self.state.selected_idx = visible.index(item)
        return True

    def toggle_chosen(self) -> None:
        selected = self.selected_item
        if selected is None:
            return
        if selected in self.state.chosen:
            self.state.chosen = [item for item in self.state.chosen if item != selected]
        else:
            self.state.chosen = [*self.state.chosen, selected]

    def toggle_show_hidden(self) -> None:
        self._notify("Hiding hidden items" if self.state.show_hidden else "Showing hidden items")
        selected = self.selected_item
        self.state.show_hidden = not self.state.show_hidden
        visible = self.visible_items
        if selected is not None and selected in visible:
            self.state.selected_idx = visible.index(selected)
        else:
            self._clamp_selection()

    def type_ahead(self, char: str) -> int | None:
        """Select the first visible item matching the typed prefix."""
        if len(char) != 1:
            return None
        idx = self.finder.add_char_and_search(char, self.visible_items)
        if idx < 0:
            return None
        self.state.selected_idx = idx
        return idx

    # navigation
    def go_in(self, path: Path | None = None) -> Cursor | None:
        """Enter ``path`` or, by default, the selected directory."""
        if path is None:
            selected = self.selected_item
            if selected is None or not selected.is_dir:
                return None
            path = selected.path
        target = canonical_path(path)
        return self._navigate(lambda: self.navigator.to_child(target))

    def go_back(self) -> Cursor:
        return self._navigate(self.navigator.to_parent)

    def go_to(self, path: Path) -> Cursor | None:
        """Jump anywhere; returns ``None`` when already there."""
        target = canonical_path(path)
        if target == self.state.path:
            return None
        return self._navigate(lambda: self.navigator.to_path(target))

    def refresh(self) -> None:
        """Adopt the navigator's latest listing for the directory on screen."""
        cursor = self.navigator.current_cursor()
        if cursor.current_path != self.state.path:
            return
        self.state.items = list(cursor.current_entries)
        self.state.chosen = [item for item in self.state.chosen if item in self.state.items]
        self._clamp_selection()

    # commands
    def copy(self) -> bool:
        return self._store_in_clipboard("copy")

    def cut(self) -> bool:
        return self._store_in_clipboard("cut")

    def paste(self) -> list[DirectoryItem]:
        action = self.commands.clipboard.action
        try:
            pasted = self.commands.paste(self.state.path)
        finally:
            self.refresh()
        self._notify("Copied items" if action == "copy" else "Cut items")
        return pasted

    def delete(self) -> list[DirectoryItem]:
        """Permanently delete the selection; confirmation happens before this call."""
        return self._remove(self.commands.delete_items, "Deleted items")

    def trash(self) -> list[DirectoryItem]:
        return self._remove(self.commands.trash_items, "Sent items to trash")

    def create(self, name: str | None, kind: ItemKind | None) -> bool:
        created = self.commands.create_item(name, self.state.path, kind)
        if created:
            self.refresh()
        return created

    def rename(self, old_name: str | None, new_name: str | None) -> bool:
        renamed = self.commands.rename_item(old_name, new_name, self.state.path)
        if renamed:
            self.refresh()
        return renamed

    # internals
    def _notify(self, message: str) -> None:
        if self.notify is not None:
            self.notify(message)

    def _clamp_selection(self) -> None:
        upper = max(0, len(self.visible_items) - 1)
        self.state.selected_idx = max(0, min(self.state.selected_idx, upper))

    def _navigate(self, move: Callable[[], Cursor]) -> Cursor:
        departing = None
        if self.state.items:
            departing = HistoryCacheEntry.capture(self.state.path, self.state.selected_idx, self.state.items)
        try:
            cursor = move()
        except WatchError:
            self._depart(departing)
            self._arrive(self.navigator.current_cursor())
            raise
        self._depart(departing)
        self._arrive(cursor)
        return cursor

    def _depart(self, departing: HistoryCacheEntry | None) -> None:
        if departing is None:
            return
        if departing.path != self.navigator.current_cursor().current_path:
            self.history.cache(departing)

    def _arrive(self, cursor: Cursor) -> None:
        self.finder.reset()
        cached = self.history.pop_if_present(cursor.current_path)
        self.state.path = cursor.current_path
        if cached is not None:
            logger.debug("Restored view of %s from history", cursor.current_path)
            self.state.items = list(cached.entries)
            self.state.selected_idx = cached.selected_index
        else:
            self.state.items = list(cursor.current_entries)
            self.state.selected_idx = 0
        self.state.chosen = [item for item in self.state.chosen if item in self.state.items]
        self._clamp_selection()

    def _store_in_clipboard(self, action: Literal["copy", "cut"]) -> bool:
        items = self.selected_items
        if not items:
            return False
        self.commands.set_clipboard(items, action)
        self._notify("Copying item(s)" if action == "copy" else "Cutting item(s)")
        return True

    def _remove(
        self,
        remove: Callable[[Sequence[DirectoryItem]], list[DirectoryItem]],
        message: str,
    ) -> list[DirectoryItem]:
        items = self.selected_items
        if not items:
            return []
        try:
            removed = remove(items)
        except BatchMutationError:
            self.state.selected_idx = 0
            self.refresh()
            raise
        self.state.selected_idx = 0
        self.refresh()
        self._notify(message)
        return removed


__all__ = [
    "TYPE_AHEAD_RESET_SECONDS",
    "TypeAheadFinder",
    "ListViewState",
    "StatusSummary",
    "DirectoryListController",
]
