"""Poll-based change notifications for one directory.

Computes a cheap hash over a directory's immediate children and compares it on
a fixed interval. A differing signature triggers the subscriber callback.
"""

from __future__ import annotations

import hashlib
import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

from ..errors import WatchError

logger = logging.getLogger(__name__)

DEFAULT_POLL_SECONDS = 0.5


def _stat_token(st: os.stat_result | None) -> str:
    if st is None:
        return "error"
    return f"{st.st_mtime_ns}:{st.st_size}:{st.st_mode}"


def build_directory_signature(directory: Path) -> str:
    """Build a digest over ``directory`` and the metadata of its immediate children.

    Hidden children are included; visibility is a listing concern and a
    change to a hidden item still invalidates the listing. A missing or
    unreadable directory yields a stable signature of its own.
    """
    tokens = [f"dir:{directory}"]
    try:
        tokens.append(f"mode:{directory.stat().st_mode}")
        with os.scandir(directory) as entries:
            children = sorted(entries, key=lambda child: child.name)
            for child in children:
                try:
                    kind = "d" if child.is_dir(follow_symlinks=False) else "f"
                    st = child.stat(follow_symlinks=False)
                except OSError:
                    kind, st = "?", None
                tokens.append(f"child:{child.name}:{kind}:{_stat_token(st)}")
    except FileNotFoundError:
        tokens.append("missing")
    except OSError as exc:
        tokens.append(f"unreadable:{exc.errno}")

    digest = hashlib.blake2b(digest_size=20)
    for token in tokens:
        digest.update(token.encode("utf-8", errors="surrogateescape"))
        digest.update(b"\0")
    return digest.hexdigest()


class PollingSubscription:
    """Daemon-thread watch that fires ``on_change`` when the signature moves.

    ``cancel()`` is idempotent and never blocks on an in-flight callback;
    once it returns no further callback is started.
    """

    def __init__(
        self,
        path: Path,
        on_change: Callable[[], None],
        *,
        poll_seconds: float = DEFAULT_POLL_SECONDS,
        build_signature: Callable[[Path], str] = build_directory_signature,
    ) -> None:
        self.path = path
        self._on_change = on_change
        self._poll_seconds = max(0.01, poll_seconds)
        self._build_signature = build_signature
        self._stop = threading.Event()
        self._lock = threading.Lock()
        if not path.is_dir():
            raise WatchError(path, "not a directory")
        self._signature = build_signature(path)
        self._thread = threading.Thread(
            target=self._run,
            name=f"lazynav-watch-{path.name or path}",
            daemon=True,
        )
        self._thread.start()

    @property
    def active(self) -> bool:
        return not self._stop.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._stop.is_set():
                return
            self._stop.set()
        logger.debug("Stopped watching %s", self.path)

    def _run(self) -> None:
        while not self._stop.wait(self._poll_seconds):
            try:
                signature = self._build_signature(self.path)
            except Exception:
                logger.warning("Watch scan failed for %s", self.path, exc_info=True)
                continue
            if signature == self._signature:
                continue
            self._signature = signature
            with self._lock:
                if self._stop.is_set():
                    return
            logger.debug("Change detected in %s", self.path)
            try:
                self._on_change()
            except Exception:
                logger.exception("Change handler failed for %s", self.path)


__all__ = [
    "DEFAULT_POLL_SECONDS",
    "build_directory_signature",
    "PollingSubscription",
]
