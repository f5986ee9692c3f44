"""Directory Store capability and its local-filesystem implementation."""

from __future__ import annotations

from .base import DirectoryStore, Subscription
from .watch import DEFAULT_POLL_SECONDS, PollingSubscription, build_directory_signature
from .local import LocalDirectoryStore

__all__ = [
    "DirectoryStore",
    "Subscription",
    "DEFAULT_POLL_SECONDS",
    "PollingSubscription",
    "build_directory_signature",
    "LocalDirectoryStore",
]
