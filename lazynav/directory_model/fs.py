"""Filesystem scanning for one directory's immediate items."""

from __future__ import annotations

import os
from pathlib import Path

from ..errors import ListError
from .sorting import is_hidden_item, sort_by_type_then_alphanumeric
from .types import DirectoryItem, ListOptions, canonical_path


def _describe_os_error(exc: OSError) -> str:
    if isinstance(exc, FileNotFoundError):
        return "no such directory"
    if isinstance(exc, NotADirectoryError):
        return "not a directory"
    if isinstance(exc, PermissionError):
        return "permission denied"
    return exc.strerror or exc.__class__.__name__


def list_directory_items(
    directory: Path,
    options: ListOptions | None = None,
    *,
    hide_unix_style: bool = True,
) -> list[DirectoryItem]:
    """List the immediate items of ``directory``.

    Children are stat'ed without following symlinks. The result is sorted
    with ``options.sort`` (directories first, natural names by default), then
    filtered with ``options.filter``, then stripped of hidden items when
    ``options.hide_hidden`` is set.

    Raises ``ListError`` when ``directory`` is missing, is not a directory or
    cannot be scanned.
    """
    options = options or ListOptions()
    directory = canonical_path(directory)
    try:
        is_dir = directory.is_dir()
    except OSError as exc:
        raise ListError(directory, _describe_os_error(exc)) from exc
    if not is_dir:
        reason = "not a directory" if directory.exists() else "no such directory"
        raise ListError(directory, reason)

    items: list[DirectoryItem] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                child_path = directory / child.name
                try:
                    child_is_dir = child.is_dir(follow_symlinks=False)
                except OSError:
                    child_is_dir = False
                try:
                    st = child.stat(follow_symlinks=False)
                except OSError:
                    st = None
                items.append(
                    DirectoryItem(
                        name=child.name,
                        path=child_path,
                        is_dir=child_is_dir,
                        is_hidden=is_hidden_item(child_path, st, hide_unix_style=hide_unix_style),
                    )
                )
    except OSError as exc:
        raise ListError(directory, _describe_os_error(exc)) from exc

    sort = options.sort or sort_by_type_then_alphanumeric
    items = sort(items)
    if options.filter is not None:
        items = [item for item in items if options.filter(item)]
    if options.hide_hidden:
        items = [item for item in items if not item.is_hidden]
    return items


__all__ = ["list_directory_items"]
