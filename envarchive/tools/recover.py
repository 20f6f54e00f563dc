"""
Recover tool for envarchive.

Writes a named snapshot back to disk. The target is the archived file's
base name inside the current working directory, not its original
absolute path.

The recovery process:
1. Look up the entry and body by name (missing -> ArchiveNotFoundError)
2. No file at the target -> write the body
3. File at the target with the archived checksum -> skip, nothing written
4. File at the target with other content -> push it as a backup entry,
   then overwrite it with the archived body

Invariants:
    - A local file that differs from the snapshot is archived before it
      is overwritten; the backup push completes before the write starts
    - Recovering onto an identical file writes nothing and pushes nothing
    - A completed backup is never rolled back, even if the write fails

How to change safely:
    - Two concurrent recoveries of one name may both push a backup; this
      is accepted and produces a duplicate entry, never data loss
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path, PurePath

from ..errors import ArchiveNotFoundError
from ..ids import generate_name
from ..store import ArchiveStore, utc_now

logger = logging.getLogger(__name__)


class RecoverOutcome(Enum):
    """Terminal state of a recovery."""

    RESTORED = "restored"
    SKIPPED = "skipped"
    BACKED_UP_AND_RESTORED = "backed_up_and_restored"


@dataclass(frozen=True)
class RecoverResult:
    """Result of a recovery.

    Attributes:
        name: Name of the recovered snapshot
        target: File that was (or would have been) written
        outcome: Terminal state
        backup_name: Name of the backup entry, if one was pushed
    """

    name: str
    target: Path
    outcome: RecoverOutcome
    backup_name: str | None = None


class RecoveryTool:
    """Restores archived snapshots into the working directory.

    Example:
        >>> tool = RecoveryTool(store)
        >>> result = await tool.recover("01J9ZQ3V8K6M2X4T7B5N0C1D2E")
        >>> if result.backup_name:
        ...     print(f"Previous content saved as {result.backup_name}")
    """

    def __init__(
        self,
        store: ArchiveStore,
        cwd: str | Path | None = None,
        name_factory: Callable[[], str] = generate_name,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the recovery tool.

        Args:
            store: Archive store holding the snapshots
            cwd: Directory to restore into (process cwd if not provided)
            name_factory: Source of names for backup entries
            clock: Source of backup capture timestamps
        """
        self.store = store
        self.cwd = Path(cwd) if cwd is not None else None
        self.name_factory = name_factory
        self.clock = clock

    def resolve_target(self, archived_path: str) -> Path:
        """Map an archived path to its restore location."""
        base = self.cwd if self.cwd is not None else Path.cwd()
        return base / PurePath(archived_path).name

    async def recover(self, name: str) -> RecoverResult:
        """Restore the snapshot called `name`.

        Args:
            name: Name of the archived entry

        Returns:
            RecoverResult describing what was done

        Raises:
            ArchiveNotFoundError: If no entry has this name
            OSError: If the target cannot be read or written
        """
        found = await self.store.get(name)
        if found is None:
            raise ArchiveNotFoundError(name)

        entry, body = found
        target = self.resolve_target(entry.path)
        backup_name = None

        if target.exists():
            if await self.store.is_same_by_name(name, target):
                logger.info(f"{target} already matches {name}, nothing to do")
                return RecoverResult(name=name, target=target, outcome=RecoverOutcome.SKIPPED)

            backup_name = self.name_factory()
            await self.store.push(target, self.clock(), backup_name)
            logger.info(f"Backed up existing {target} as {backup_name}")

        self._write(target, body)
        logger.info(f"Restored {name} to {target}")

        outcome = (
            RecoverOutcome.BACKED_UP_AND_RESTORED if backup_name else RecoverOutcome.RESTORED
        )
        return RecoverResult(name=name, target=target, outcome=outcome, backup_name=backup_name)

    def _write(self, target: Path, body: str) -> None:
        """Write the archived body byte-for-byte (no newline translation)."""
        with open(target, "w", encoding="utf-8", newline="") as f:
            f.write(body)
