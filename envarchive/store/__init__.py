"""
Store module for envarchive - persisted archive entries.

This module handles:
- The SQLite archives table and its indexes
- Append-only pushes with checksum computed from the stored body
- Latest-checksum lookups used by crawl and recovery
- Listing and searching entries by path

Invariants:
    - The store is the only component that touches persisted state
    - Entries are never updated or deleted
"""

from .archive_store import (
    ArchiveEntry,
    ArchiveStore,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

__all__ = [
    "ArchiveEntry",
    "ArchiveStore",
    "format_timestamp",
    "parse_timestamp",
    "utc_now",
]
