"""Per-path mutual exclusion for filesystem mutations."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from ..directory_model import canonical_path


@dataclass
class _PathSlot:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class PathSequencer:
    """Serialize operations that target the same path.

    Operations on disjoint paths run concurrently. Locks for several paths
    are taken in sorted order so two multi-path holders cannot deadlock.
    Slots are dropped once no holder or waiter references them.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._slots: dict[Path, _PathSlot] = {}

    @contextmanager
    def hold(self, *paths: Path | None) -> Iterator[None]:
        keys = sorted({canonical_path(path) for path in paths if path is not None}, key=str)
        with self._lock:
            slots = []
            for key in keys:
                slot = self._slots.setdefault(key, _PathSlot())
                slot.users += 1
                slots.append(slot)
        acquired: list[_PathSlot] = []
        try:
            for slot in slots:
                slot.lock.acquire()
                acquired.append(slot)
            yield
        finally:
            for slot in reversed(acquired):
                slot.lock.release()
            with self._lock:
                for key, slot in zip(keys, slots):
                    slot.users -= 1
                    if slot.users == 0 and self._slots.get(key) is slot:
                        del self._slots[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)


__all__ = ["PathSequencer"]
