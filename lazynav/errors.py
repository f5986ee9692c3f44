"""Exception hierarchy for the navigation engine.

Exception Hierarchy:
    LazyNavError (base)
    ├── ListError - a directory could not be listed
    ├── NavigationError - a cursor move was rejected
    │   ├── NotFoundError - child path is not a directory entry of the cursor
    │   ├── NoParentError - current directory has no existing parent
    │   └── ListFailedError - navigation target could not be listed
    ├── MutationError - create/rename/delete/trash/copy/move failed
    │   └── BatchMutationError - one or more items of a batch failed
    ├── ClipboardError
    │   └── ClipboardEmptyError - paste without a clipboard action
    └── WatchError - change subscription could not be established

Low-level ``OSError`` values are translated at the store boundary and chained
with ``raise ... from`` so the original cause stays inspectable.
"""

from __future__ import annotations

from pathlib import Path


class LazyNavError(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ListError(LazyNavError):
    """A directory listing failed (missing, not a directory, permission denied)."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not list {path}: {reason}")


class NavigationError(LazyNavError):
    """Base class for rejected cursor moves."""

    def __init__(self, message: str, path: Path | None) -> None:
        self.path = path
        super().__init__(message)


class NotFoundError(NavigationError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"{path} is not a directory in the current listing", path)


class NoParentError(NavigationError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"{path} has no parent directory", path)


class ListFailedError(NavigationError):
    """Navigation target could not be listed; ``cause`` holds the listing error."""

    def __init__(self, path: Path, cause: ListError) -> None:
        self.cause = cause
        super().__init__(f"Could not navigate to {path}: {cause.reason}", path)


class MutationError(LazyNavError):
    """A filesystem mutation failed.

    Attributes:
        source: Path the operation acted on.
        destination: Target path for copy/move/rename, otherwise ``None``.
    """

    def __init__(self, message: str, source: Path, destination: Path | None = None) -> None:
        self.source = source
        self.destination = destination
        if destination is None:
            full_message = f"{message}: {source}"
        else:
            full_message = f"{message}: {source} -> {destination}"
        super().__init__(full_message)


class BatchMutationError(MutationError):
    """Aggregate of every failed item in a best-effort batch operation.

    Items that succeeded are not rolled back; ``failures`` lists the rest in
    submission order.
    """

    def __init__(self, failures: list[MutationError]) -> None:
        if not failures:
            raise ValueError("BatchMutationError requires at least one failure")
        self.failures = list(failures)
        first = self.failures[0]
        LazyNavError.__init__(
            self,
            f"{len(self.failures)} item(s) failed: " + "; ".join(str(failure) for failure in self.failures),
        )
        self.source = first.source
        self.destination = first.destination

    @property
    def failed_paths(self) -> list[Path]:
        return [failure.source for failure in self.failures]


class ClipboardError(LazyNavError):
    pass


class ClipboardEmptyError(ClipboardError):
    def __init__(self) -> None:
        super().__init__("Clipboard is empty")


class WatchError(LazyNavError):
    """Change notifications for ``path`` could not be established."""

    def __init__(self, path: Path, reason: str = "subscription failed") -> None:
        self.path = path
        super().__init__(f"Could not watch {path}: {reason}")


__all__ = [
    "LazyNavError",
    "ListError",
    "NavigationError",
    "NotFoundError",
    "NoParentError",
    "ListFailedError",
    "MutationError",
    "BatchMutationError",
    "ClipboardError",
    "ClipboardEmptyError",
    "WatchError",
]
