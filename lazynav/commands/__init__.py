"""Clipboard and mutation verbs over the Directory Store."""

from __future__ import annotations

from .sequencing import PathSequencer
from .surface import (
    DEFAULT_COMMAND_WORKERS,
    EMPTY_CLIPBOARD,
    ClipboardAction,
    ClipboardState,
    CommandSurface,
)

__all__ = [
    "PathSequencer",
    "DEFAULT_COMMAND_WORKERS",
    "EMPTY_CLIPBOARD",
    "ClipboardAction",
    "ClipboardState",
    "CommandSurface",
]
