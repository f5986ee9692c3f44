"""Public package surface for lazynav.

Exports ``main`` for programmatic CLI invocation.
The engine lives in ``lazynav.navigator``, ``lazynav.store`` and
``lazynav.commands``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
