"""Domain model for directory listings.

This package contains non-UI listing primitives:
- immutable directory item datatypes and listing options
- default natural ordering and hidden-item detection
- a filesystem scanner for one directory's immediate items
"""

from __future__ import annotations

from .types import DirectoryItem, ItemFilter, ItemKind, ItemSorter, ListOptions, canonical_path
from .sorting import is_hidden_item, natural_name_key, sort_by_type_then_alphanumeric
from .fs import list_directory_items

__all__ = [
    "DirectoryItem",
    "ItemFilter",
    "ItemKind",
    "ItemSorter",
    "ListOptions",
    "canonical_path",
    "is_hidden_item",
    "natural_name_key",
    "sort_by_type_then_alphanumeric",
    "list_directory_items",
]
