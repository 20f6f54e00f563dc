"""
Crawl tool for envarchive.

Walks a directory for environment files and archives the ones whose
content changed since they were last archived.

Per candidate file:
1. Same checksum as the newest entry for that exact path -> SKIP
2. Dry run -> WOULD_PUSH, store untouched
3. Otherwise push under a fresh ULID name -> PUSHED

Invariants:
    - Re-crawling an unchanged tree performs zero pushes
    - A path gains a new entry only when its content changed
    - All entries pushed by one crawl share its capture timestamp
    - The first failure aborts the crawl; entries already pushed stay

How to change safely:
    - A best-effort mode (continue past unreadable files) changes
      observable behavior; add it behind an explicit flag
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from ..discovery import search_env_files
from ..ids import generate_name
from ..store import ArchiveStore, utc_now

logger = logging.getLogger(__name__)


class CrawlAction(Enum):
    """What crawl did with one candidate file."""

    SKIP = "skip"
    WOULD_PUSH = "would_push"
    PUSHED = "pushed"


@dataclass(frozen=True)
class CrawlRecord:
    """Outcome for a single candidate file.

    Attributes:
        path: Candidate file
        action: What happened to it
        name: Name of the new entry (PUSHED only)
    """

    path: Path
    action: CrawlAction
    name: str | None = None


@dataclass
class CrawlResult:
    """Result of a crawl.

    Attributes:
        directory: Directory that was crawled
        dry_run: Whether the store was left untouched
        records: One record per candidate, in discovery order
    """

    directory: Path
    dry_run: bool
    records: list[CrawlRecord] = field(default_factory=list)

    def _count(self, action: CrawlAction) -> int:
        return sum(1 for r in self.records if r.action is action)

    @property
    def pushed(self) -> int:
        return self._count(CrawlAction.PUSHED)

    @property
    def skipped(self) -> int:
        return self._count(CrawlAction.SKIP)

    @property
    def would_push(self) -> int:
        return self._count(CrawlAction.WOULD_PUSH)


class Crawler:
    """Archives changed environment files under a directory.

    Example:
        >>> crawler = Crawler(store, dry_run=False)
        >>> result = await crawler.crawl(Path("~/projects").expanduser())
        >>> print(f"{result.pushed} pushed, {result.skipped} unchanged")
    """

    def __init__(
        self,
        store: ArchiveStore,
        dry_run: bool = False,
        name_factory: Callable[[], str] = generate_name,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the crawler.

        Args:
            store: Archive store to push into
            dry_run: Report intended pushes without writing
            name_factory: Source of names for new entries
            clock: Source of the crawl's capture timestamp
        """
        self.store = store
        self.dry_run = dry_run
        self.name_factory = name_factory
        self.clock = clock

    async def crawl(self, directory: str | Path) -> CrawlResult:
        """Crawl a directory.

        Args:
            directory: Root directory to search

        Returns:
            CrawlResult with one record per candidate file

        Raises:
            OSError: If the directory or a candidate file cannot be read
            StoreError: If the store rejects a query or insert
        """
        directory = Path(directory)
        now = self.clock()
        result = CrawlResult(directory=directory, dry_run=self.dry_run)

        logger.info(f"Starting crawl of {directory}" + (" (dry run)" if self.dry_run else ""))

        for file_path in search_env_files(directory):
            record = await self._process(file_path, now)
            result.records.append(record)

        logger.info(
            f"Crawl finished: {result.pushed} pushed, {result.skipped} skipped, "
            f"{result.would_push} would push"
        )
        return result

    async def _process(self, file_path: Path, now: datetime) -> CrawlRecord:
        """Handle one candidate file."""
        if await self.store.is_same_as_latest(file_path):
            logger.info(f"SKIP {file_path}")
            return CrawlRecord(path=file_path, action=CrawlAction.SKIP)

        if self.dry_run:
            logger.info(f"WOULD PUSH {file_path}")
            return CrawlRecord(path=file_path, action=CrawlAction.WOULD_PUSH)

        name = self.name_factory()
        entry = await self.store.push_if_changed(file_path, now, name)
        if entry is None:
            # Another writer archived identical content since the check
            logger.info(f"SKIP {file_path}")
            return CrawlRecord(path=file_path, action=CrawlAction.SKIP)

        logger.info(f"PUSHED {file_path} as {name}")
        return CrawlRecord(path=file_path, action=CrawlAction.PUSHED, name=name)
