"""
Error types for envarchive.

This module defines the exception types raised by the store and the
orchestrators:
- EnvArchiveError: Base exception
- StoreError: SQLite schema or query failure
- DuplicateNameError: An entry with the same name already exists
- DuplicateEntryError: An entry with the same (path, created_at) exists
- StoreNotInitializedError: The database file has not been created
- ArchiveNotFoundError: No entry matches the requested name
- TimestampParseError: A stored created_at value is malformed

File I/O failures are not wrapped: OSError and UnicodeDecodeError
propagate as-is so callers can tell "file unreadable" apart from
"store failed".

Invariants:
    - All errors raised by envarchive inherit from EnvArchiveError
    - Every error carries a stable code for programmatic handling
"""

from __future__ import annotations

from typing import Any


class EnvArchiveError(Exception):
    """Base exception for all envarchive errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "ENV_ARCHIVE_ERROR"
        self.details = details or {}


class StoreError(EnvArchiveError):
    """The archive database rejected a statement."""

    def __init__(
        self,
        message: str,
        code: str = "STORE_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class DuplicateNameError(StoreError):
    """An entry with this name has already been pushed.

    Names are stable handles to exactly one snapshot, so a second push
    under the same name is rejected rather than overwriting the first.
    """

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Archive name already exists: {name}",
            code="DUPLICATE_NAME",
            details={"name": name},
        )
        self.name = name


class DuplicateEntryError(StoreError):
    """An entry for this path was already captured at this timestamp."""

    def __init__(self, path: str, created_at: str) -> None:
        super().__init__(
            f"Archive entry already exists for {path} at {created_at}",
            code="DUPLICATE_ENTRY",
            details={"path": path, "created_at": created_at},
        )
        self.path = path
        self.created_at = created_at


class StoreNotInitializedError(StoreError):
    """The archive database file does not exist yet."""

    def __init__(self, database_path: str) -> None:
        super().__init__(
            f"Archive database not found: {database_path} (run `envarchive init` first)",
            code="NOT_INITIALIZED",
            details={"database_path": database_path},
        )
        self.database_path = database_path


class ArchiveNotFoundError(EnvArchiveError):
    """No archived entry matches the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Archive not found: {name}",
            code="NOT_FOUND",
            details={"name": name},
        )
        self.name = name


class TimestampParseError(EnvArchiveError):
    """A stored created_at value could not be parsed."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Malformed archive timestamp: {value!r}",
            code="TIMESTAMP_PARSE",
            details={"value": value},
        )
        self.value = value
