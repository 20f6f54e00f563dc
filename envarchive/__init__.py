"""
envarchive - versioned snapshot store for .env files.

Every archived file is kept as an immutable entry carrying its original
path, capture time, full body and SHA-256 checksum:

    ┌─────────────┐     ┌──────────────┐     ┌──────────────────┐
    │  crawl      │────▶│              │     │                  │
    │  push       │────▶│ ArchiveStore │────▶│ SQLite (archives)│
    │  recover    │────▶│              │     │                  │
    └─────────────┘     └──────────────┘     └──────────────────┘

Invariants:
    - Entries are append-only; nothing updates or deletes a row
    - Crawl only archives files whose content changed
    - Recover archives a conflicting local file before overwriting it

How to change safely:
    - Keep the archives schema backward compatible; existing stores are
      opened with CREATE ... IF NOT EXISTS
"""

from ._version import __version__
from .errors import (
    ArchiveNotFoundError,
    DuplicateEntryError,
    DuplicateNameError,
    EnvArchiveError,
    StoreError,
    StoreNotInitializedError,
    TimestampParseError,
)
from .store import ArchiveEntry, ArchiveStore
from .tools import Crawler, RecoveryTool

__all__ = [
    "__version__",
    # Store
    "ArchiveEntry",
    "ArchiveStore",
    # Workflows
    "Crawler",
    "RecoveryTool",
    # Errors
    "ArchiveNotFoundError",
    "DuplicateEntryError",
    "DuplicateNameError",
    "EnvArchiveError",
    "StoreError",
    "StoreNotInitializedError",
    "TimestampParseError",
]
