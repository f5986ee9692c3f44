"""Command-line front door for lazynav.

Lists a directory through the navigation engine and, with ``--watch``, keeps
reprinting it whenever the directory changes.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import TextIO

from . import config
from .directory_model import ListOptions
from .errors import LazyNavError
from .navigator import Cursor, Navigator
from .store import LocalDirectoryStore


def format_cursor(cursor: Cursor) -> str:
    """Render parent path and entries, one per line, directories with ``/``."""
    out = [f"parent: {cursor.parent_path if cursor.parent_path is not None else '-'}"]
    out.append(f"{cursor.current_path}:")
    for entry in cursor.current_entries:
        out.append(f"  {entry.name}{'/' if entry.is_dir else ''}")
    return "\n".join(out) + "\n"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(
    argv: list[str] | None = None,
    *,
    default_path: Path | None = None,
    out: TextIO | None = None,
    stop_event: threading.Event | None = None,
) -> None:
    """Parse CLI arguments and print the listing of a directory.

    ``default_path``, ``out`` and ``stop_event`` are primarily for tests; when
    omitted the current working directory, stdout and Ctrl-C are used.
    """
    parser = argparse.ArgumentParser(
        description="List a directory through the lazynav navigation engine."
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to list. Defaults to current directory.")
    parser.add_argument("--show-hidden", action="store_true", help="Include hidden items.")
    parser.add_argument("--watch", action="store_true", help="Reprint the listing whenever the directory changes.")
    parser.add_argument("--verbose", action="store_true", help="Log engine activity to stderr.")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    out = out or sys.stdout

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path or default_path)
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")

    show_hidden = args.show_hidden or config.load_show_hidden()
    store = LocalDirectoryStore(
        hide_unix_style=config.load_hide_unix_style_hidden_items(),
        poll_seconds=config.load_watch_poll_seconds(),
    )
    try:
        navigator = Navigator(path, store, options=ListOptions(hide_hidden=not show_hidden))
    except LazyNavError as exc:
        raise SystemExit(str(exc)) from exc

    try:
        out.write(format_cursor(navigator.current_cursor()))
        out.flush()
        if not args.watch:
            return

        def on_cursor(cursor: Cursor) -> None:
            out.write(format_cursor(cursor))
            out.flush()

        navigator.add_listener(on_cursor)
        try:
            navigator.start_watching()
        except LazyNavError as exc:
            raise SystemExit(str(exc)) from exc
        stop = stop_event or threading.Event()
        try:
            stop.wait()
        except KeyboardInterrupt:
            pass
    finally:
        navigator.close()


if __name__ == "__main__":
    main()
