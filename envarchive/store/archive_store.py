"""
SQLite archive store for envarchive.

This module manages the single SQLite file that holds every archived
environment file:
- One row per push, carrying the full body and its checksum
- Lookups by exact path, by name, by path prefix and by path substring
- Latest-checksum queries used for change detection

The store is append-only. Rows are never updated or deleted; the only
way to drop data is to remove the whole database file (`init --clean`).

Invariants:
    - A connection is opened per operation and closed afterwards
    - checksum is always the digest of the exact bytes stored as body
    - name is unique across the store (DuplicateNameError otherwise)
    - (path, created_at) is unique across the store
    - "Latest" means the greatest created_at, ties broken by insertion order

How to change safely:
    - Schema changes must keep CREATE ... IF NOT EXISTS semantics so that
      initialize() stays safe on existing stores
    - Keep created_at in fixed-width UTC ISO 8601 so that text ordering
      matches time ordering

Table schema:
    archives:
        - id INTEGER PRIMARY KEY AUTOINCREMENT
        - name TEXT NOT NULL UNIQUE
        - path TEXT NOT NULL
        - created_at TEXT NOT NULL (ISO 8601, UTC, microseconds)
        - body TEXT NOT NULL
        - checksum TEXT NOT NULL (hex sha256)
        - UNIQUE (path, created_at)
        - INDEX on (path), INDEX on (created_at)
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..digest import bytes_checksum, file_checksum
from ..errors import (
    DuplicateEntryError,
    DuplicateNameError,
    StoreError,
    StoreNotInitializedError,
    TimestampParseError,
)

logger = logging.getLogger(__name__)

_ENTRY_COLUMNS = "name, path, created_at, checksum"


@dataclass(frozen=True)
class ArchiveEntry:
    """One archived snapshot of a file, without its body.

    Attributes:
        name: Unique handle for this snapshot
        path: Path of the captured file, as given at push time
        created_at: Capture time (UTC)
        checksum: Hex sha256 of the archived body
    """

    name: str
    path: str
    created_at: datetime
    checksum: str


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp the way it is stored.

    Naive datetimes are taken to be UTC. Aware datetimes are converted.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    """Parse a stored created_at value back into an aware UTC datetime.

    Raises:
        TimestampParseError: If the value is not ISO 8601
    """
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise TimestampParseError(value) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class ArchiveStore:
    """SQLite store of archived environment files.

    Thread safety:
        Each operation creates its own connection. Concurrent processes
        rely on SQLite's per-statement atomicity and busy timeout; there
        is no application-level lock across statements.

    Example:
        >>> store = ArchiveStore(Path.home() / ".env_archive")
        >>> await store.initialize()
        >>> entry = await store.push(Path("/srv/app/.env"), now, "release-1")
        >>> await store.latest_checksum_by_path("/srv/app/.env") == entry.checksum
        True
    """

    def __init__(self, database_path: str | Path, busy_timeout_ms: int = 5000) -> None:
        """Initialize the archive store.

        Args:
            database_path: SQLite database file
            busy_timeout_ms: SQLite busy timeout
        """
        self.database_path = Path(database_path)
        self.busy_timeout_ms = busy_timeout_ms
        self._lock = asyncio.Lock()

    def _require_database(self) -> None:
        if not self.database_path.exists():
            raise StoreNotInitializedError(str(self.database_path))

    @contextmanager
    def _get_connection(self, create: bool = False) -> Iterator[sqlite3.Connection]:
        """Open a connection to the archive database.

        Args:
            create: Whether to create the database file if it does not exist

        Yields:
            SQLite connection

        Raises:
            StoreNotInitializedError: If the file is missing and create=False
        """
        if not create:
            self._require_database()

        if create:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            str(self.database_path),
            timeout=self.busy_timeout_ms / 1000.0,
            isolation_level=None,  # Autocommit by default, explicit transactions
        )
        conn.row_factory = sqlite3.Row

        try:
            conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout_ms}")
            yield conn
        except sqlite3.Error as e:
            raise StoreError(f"Archive store error: {e}") from e
        finally:
            conn.close()

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        """Create database schema."""
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS archives (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                path TEXT NOT NULL,
                created_at TEXT NOT NULL,
                body TEXT NOT NULL,
                checksum TEXT NOT NULL,
                UNIQUE (path, created_at)
            );

            CREATE INDEX IF NOT EXISTS archives_path_idx ON archives (path);
            CREATE INDEX IF NOT EXISTS archives_created_at_idx ON archives (created_at);
        """)

    async def initialize(self) -> None:
        """Create the database file and schema if they don't exist.

        Safe to call on an existing store; never drops data.
        """
        async with self._lock:
            with self._get_connection(create=True) as conn:
                self._create_schema(conn)
        logger.info(f"Initialized archive database: {self.database_path}")

    def _read_file(self, file_path: Path) -> tuple[str, str]:
        """Read a file once and derive body and checksum from the same bytes."""
        data = file_path.read_bytes()
        return data.decode("utf-8"), bytes_checksum(data)

    def _insert(
        self,
        conn: sqlite3.Connection,
        name: str,
        path: str,
        created_at: str,
        body: str,
        checksum: str,
    ) -> None:
        try:
            conn.execute(
                """
                INSERT INTO archives (name, path, created_at, body, checksum)
                VALUES (?, ?, ?, ?, ?)
                """,
                (name, path, created_at, body, checksum),
            )
        except sqlite3.IntegrityError as e:
            message = str(e)
            if "archives.name" in message:
                raise DuplicateNameError(name) from e
            if "archives.path" in message:
                raise DuplicateEntryError(path, created_at) from e
            raise

    async def push(self, file_path: str | Path, timestamp: datetime, name: str) -> ArchiveEntry:
        """Archive the current content of a file.

        Args:
            file_path: File to archive; stored as given
            timestamp: Capture time
            name: Unique name for the new entry

        Returns:
            The created entry

        Raises:
            StoreNotInitializedError: If the database file does not exist
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not UTF-8 text
            DuplicateNameError: If an entry named `name` already exists
            DuplicateEntryError: If the path was already captured at `timestamp`
        """
        file_path = Path(file_path)
        self._require_database()
        body, checksum = self._read_file(file_path)
        path = str(file_path)
        created_at = format_timestamp(timestamp)

        with self._get_connection() as conn:
            self._insert(conn, name, path, created_at, body, checksum)

        logger.debug(
            "Pushed archive",
            extra={"entry_name": name, "path": path, "created_at": created_at},
        )

        return ArchiveEntry(
            name=name,
            path=path,
            created_at=parse_timestamp(created_at),
            checksum=checksum,
        )

    async def push_if_changed(
        self,
        file_path: str | Path,
        timestamp: datetime,
        name: str,
    ) -> ArchiveEntry | None:
        """Archive a file unless its latest entry already holds the same content.

        The latest-checksum lookup and the insert run in one IMMEDIATE
        transaction, so another writer cannot slip an identical entry in
        between them.

        Args:
            file_path: File to archive
            timestamp: Capture time
            name: Unique name for the new entry

        Returns:
            The created entry, or None if the content was unchanged
        """
        file_path = Path(file_path)
        self._require_database()
        body, checksum = self._read_file(file_path)
        path = str(file_path)
        created_at = format_timestamp(timestamp)

        with self._get_connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                latest = self._latest_checksum(conn, "path", path)
                if latest == checksum:
                    conn.execute("ROLLBACK")
                    logger.debug("Unchanged, not pushed", extra={"path": path})
                    return None

                self._insert(conn, name, path, created_at, body, checksum)
                conn.execute("COMMIT")

            except Exception:
                conn.execute("ROLLBACK")
                raise

        logger.debug(
            "Pushed archive",
            extra={"entry_name": name, "path": path, "created_at": created_at},
        )

        return ArchiveEntry(
            name=name,
            path=path,
            created_at=parse_timestamp(created_at),
            checksum=checksum,
        )

    def _latest_checksum(self, conn: sqlite3.Connection, column: str, value: str) -> str | None:
        cursor = conn.execute(
            f"""
            SELECT checksum FROM archives
            WHERE {column} = ?
            ORDER BY created_at DESC, id DESC
            LIMIT 1
            """,
            (value,),
        )
        row = cursor.fetchone()
        return row["checksum"] if row else None

    async def latest_checksum_by_path(self, path: str | Path) -> str | None:
        """Get the checksum of the newest entry for an exact path.

        Returns:
            Hex checksum, or None if the path was never archived
        """
        with self._get_connection() as conn:
            return self._latest_checksum(conn, "path", str(path))

    async def latest_checksum_by_name(self, name: str) -> str | None:
        """Get the checksum of the newest entry with this name.

        Returns:
            Hex checksum, or None if no entry has this name
        """
        with self._get_connection() as conn:
            return self._latest_checksum(conn, "name", name)

    async def is_same_as_latest(self, file_path: str | Path) -> bool:
        """Check whether a file matches the newest entry archived for its path.

        Returns False when the path has never been archived.

        Raises:
            OSError: If the file cannot be read
        """
        checksum = file_checksum(file_path)
        return await self.latest_checksum_by_path(file_path) == checksum

    async def is_same_by_name(self, name: str, file_path: str | Path) -> bool:
        """Check whether a file matches the entry archived under `name`.

        Returns False when no entry has this name.

        Raises:
            OSError: If the file cannot be read
        """
        checksum = file_checksum(file_path)
        return await self.latest_checksum_by_name(name) == checksum

    def _row_to_entry(self, row: sqlite3.Row) -> ArchiveEntry:
        return ArchiveEntry(
            name=row["name"],
            path=row["path"],
            created_at=parse_timestamp(row["created_at"]),
            checksum=row["checksum"],
        )

    async def list_all(self) -> list[ArchiveEntry]:
        """Get every entry, oldest first, ties ordered by path."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"SELECT {_ENTRY_COLUMNS} FROM archives ORDER BY created_at, path, id"
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    async def list_under(self, prefix: str | Path) -> list[ArchiveEntry]:
        """Get entries whose path starts with `prefix`.

        This is a plain, case-sensitive string prefix: "/srv/app" also
        matches "/srv/app2/.env".

        Args:
            prefix: Path prefix

        Returns:
            Matching entries, ordered like list_all()
        """
        prefix = str(prefix)
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_ENTRY_COLUMNS} FROM archives
                WHERE substr(path, 1, length(?)) = ?
                ORDER BY created_at, path, id
                """,
                (prefix, prefix),
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    async def find_by_path(self, path: str | Path) -> list[ArchiveEntry]:
        """Get the history of one exact path, newest first."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_ENTRY_COLUMNS} FROM archives
                WHERE path = ?
                ORDER BY created_at DESC, id DESC
                """,
                (str(path),),
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    async def get(self, name: str) -> tuple[ArchiveEntry, str] | None:
        """Get an entry and its body by name.

        If several rows carry the name (not possible through push, which
        enforces uniqueness), the newest one wins.

        Args:
            name: Entry name

        Returns:
            (entry, body) or None if not found
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}, body FROM archives
                WHERE name = ?
                ORDER BY created_at DESC, id DESC
                LIMIT 1
                """,
                (name,),
            )
            row = cursor.fetchone()
            if not row:
                return None

            return self._row_to_entry(row), row["body"]

    async def search(self, keyword: str) -> list[ArchiveEntry]:
        """Get entries whose path contains `keyword`.

        Matching is a literal, case-sensitive substring test.

        Returns:
            Matching entries ordered by path, newest first within a path
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_ENTRY_COLUMNS} FROM archives
                WHERE instr(path, ?) > 0
                ORDER BY path, created_at DESC, id DESC
                """,
                (keyword,),
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    async def count(self) -> int:
        """Get the number of archived entries."""
        with self._get_connection() as conn:
            cursor = conn.execute("SELECT COUNT(*) FROM archives")
            return cursor.fetchone()[0]
