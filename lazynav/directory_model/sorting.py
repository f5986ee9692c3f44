"""Default ordering and hidden-item detection for directory listings."""

from __future__ import annotations

import re
import stat
from pathlib import Path

from .types import DirectoryItem

_DIGITS_RE = re.compile(r"(\d+)")


def natural_name_key(name: str) -> tuple[tuple[int, int | str], ...]:
    """Case-insensitive key that orders embedded numbers numerically."""
    parts: list[tuple[int, int | str]] = []
    for chunk in _DIGITS_RE.split(name.casefold()):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk)))
        else:
            parts.append((1, chunk))
    return tuple(parts)


def sort_by_type_then_alphanumeric(items: list[DirectoryItem]) -> list[DirectoryItem]:
    """Directories first, then natural name order (``file2`` before ``file10``)."""
    return sorted(items, key=lambda item: (not item.is_dir, natural_name_key(item.name), item.name))


def is_hidden_item(path: Path, st: object | None = None, *, hide_unix_style: bool = True) -> bool:
    """Return whether ``path`` counts as hidden.

    Dot-prefixed names are hidden when ``hide_unix_style`` is set. On Windows
    the ``FILE_ATTRIBUTE_HIDDEN`` bit of ``st`` is honoured as well.
    """
    if hide_unix_style and path.name.startswith("."):
        return True
    attributes = getattr(st, "st_file_attributes", 0) if st is not None else 0
    hidden_flag = getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0)
    return bool(hidden_flag and attributes & hidden_flag)


__all__ = [
    "natural_name_key",
    "sort_by_type_then_alphanumeric",
    "is_hidden_item",
]
