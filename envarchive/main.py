"""
envarchive command-line entry point.

Archive .env files, browse their history and restore them.

Usage:
    envarchive init [--clean]
    envarchive push [FILE] [--name NAME]
    envarchive crawl [--dir DIR] [--dry-run]
    envarchive list [--dir DIR]
    envarchive list-all
    envarchive show NAME
    envarchive search KEYWORD
    envarchive history [FILE]
    envarchive recover NAME

Configuration comes from ENV_ARCHIVE_* environment variables.
See config.py for all available settings.

Invariants:
    - Each invocation runs one command to completion, sequentially
    - Any failure prints a message to stderr and exits non-zero
    - Paths given on the command line are canonicalized before use
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from zoneinfo import ZoneInfo

import json_log_formatter
from pydantic import ValidationError

from ._version import __version__
from .config import Settings
from .errors import ArchiveNotFoundError, EnvArchiveError
from .ids import generate_name
from .store import ArchiveEntry, ArchiveStore, utc_now
from .tools import CrawlAction, Crawler, RecoverOutcome, RecoveryTool

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """Configure logging based on configuration.

    Args:
        settings: envarchive settings
    """
    level = getattr(logging, settings.log_level.upper(), logging.WARNING)

    if settings.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]


def format_entry(entry: ArchiveEntry, tz: ZoneInfo) -> str:
    """Render one entry for listing output."""
    return f'{entry.name} "{entry.path}" {entry.created_at.astimezone(tz).isoformat()}'


class EnvArchiveCLI:
    """Command implementations.

    Each command writes human-readable output to stdout and lets errors
    propagate to main().
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.store = ArchiveStore(settings.database, busy_timeout_ms=settings.busy_timeout_ms)

    def _print_entries(self, entries: list[ArchiveEntry]) -> None:
        tz = self.settings.zone
        for entry in entries:
            print(format_entry(entry, tz))

    async def init(self, clean: bool) -> None:
        database = self.settings.database
        if clean and database.exists():
            database.unlink()
            logger.info(f"Removed archive database: {database}")
        await self.store.initialize()
        print(f"Initialized archive at {database}")

    async def push(self, file: str, name: str | None) -> None:
        path = Path(file).resolve(strict=True)
        entry = await self.store.push(path, utc_now(), name or generate_name())
        logger.info(f"Pushed {entry.path} as {entry.name}")
        print(entry.name)

    async def crawl(self, directory: str, dry_run: bool) -> None:
        root = Path(directory).resolve(strict=True)
        result = await Crawler(self.store, dry_run=dry_run).crawl(root)

        for record in result.records:
            if record.action is CrawlAction.PUSHED:
                print(f"PUSHED {record.path} {record.name}")
            elif record.action is CrawlAction.WOULD_PUSH:
                print(f"WOULD PUSH {record.path}")
            else:
                print(f"SKIP {record.path}")

        if dry_run:
            print(f"{result.would_push} would be pushed, {result.skipped} unchanged")
        else:
            print(f"{result.pushed} pushed, {result.skipped} unchanged")

    async def list_dir(self, directory: str) -> None:
        prefix = Path(directory).resolve()
        self._print_entries(await self.store.list_under(str(prefix)))

    async def list_all(self) -> None:
        self._print_entries(await self.store.list_all())

    async def show(self, name: str) -> None:
        found = await self.store.get(name)
        if found is None:
            raise ArchiveNotFoundError(name)
        _, body = found
        print(body)

    async def search(self, keyword: str) -> None:
        self._print_entries(await self.store.search(keyword))

    async def history(self, file: str) -> None:
        path = Path(file).resolve()
        self._print_entries(await self.store.find_by_path(str(path)))

    async def recover(self, name: str) -> None:
        result = await RecoveryTool(self.store).recover(name)

        if result.outcome is RecoverOutcome.SKIPPED:
            print(f"{result.target} already matches {name}")
            return
        if result.backup_name:
            print(f"Backed up {result.target} as {result.backup_name}")
        print(f"Restored {name} to {result.target}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="envarchive",
        description="Archive .env files and restore them from the archive",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-d", "--database", help="Archive database file (env: ENV_ARCHIVE_DATABASE)"
    )
    parser.add_argument("--timezone", help="Display timezone (env: ENV_ARCHIVE_TIMEZONE)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create the archive database")
    init_parser.add_argument(
        "--clean", action="store_true", help="Delete the existing archive first"
    )

    push_parser = subparsers.add_parser("push", help="Archive one file")
    push_parser.add_argument("file", nargs="?", default=".env", help="File to archive")
    push_parser.add_argument("-n", "--name", help="Entry name (generated if omitted)")

    crawl_parser = subparsers.add_parser("crawl", help="Archive changed env files under a directory")
    crawl_parser.add_argument("--dir", default=".", help="Directory to crawl")
    crawl_parser.add_argument(
        "--dry-run", action="store_true", help="Report what would be pushed without pushing"
    )

    list_parser = subparsers.add_parser("list", help="List entries under a directory")
    list_parser.add_argument("--dir", default=".", help="Directory prefix")

    subparsers.add_parser("list-all", help="List every entry")

    show_parser = subparsers.add_parser("show", help="Print an archived file")
    show_parser.add_argument("name", help="Entry name")

    search_parser = subparsers.add_parser("search", help="Find entries by path substring")
    search_parser.add_argument("keyword", help="Part of the archived file path")

    history_parser = subparsers.add_parser("history", help="List all versions of one file")
    history_parser.add_argument("file", nargs="?", default=".env", help="Archived file path")

    recover_parser = subparsers.add_parser(
        "recover", help="Restore an entry into the current directory"
    )
    recover_parser.add_argument("name", help="Entry name")

    return parser


async def run_command(cli: EnvArchiveCLI, args: argparse.Namespace) -> None:
    """Dispatch parsed arguments to the matching command."""
    if args.command == "init":
        await cli.init(args.clean)
    elif args.command == "push":
        await cli.push(args.file, args.name)
    elif args.command == "crawl":
        await cli.crawl(args.dir, args.dry_run)
    elif args.command == "list":
        await cli.list_dir(args.dir)
    elif args.command == "list-all":
        await cli.list_all()
    elif args.command == "show":
        await cli.show(args.name)
    elif args.command == "search":
        await cli.search(args.keyword)
    elif args.command == "history":
        await cli.history(args.file)
    elif args.command == "recover":
        await cli.recover(args.name)


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    overrides: dict[str, object] = {}
    if args.database:
        overrides["database"] = args.database
    if args.timezone:
        overrides["timezone"] = args.timezone
    if args.verbose:
        overrides["log_level"] = "DEBUG"

    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)
    cli = EnvArchiveCLI(settings)

    try:
        asyncio.run(run_command(cli, args))
    except (EnvArchiveError, OSError, UnicodeDecodeError) as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"{args.command} failed: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
