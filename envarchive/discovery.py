"""
Discovery of environment files on disk.

Yields the candidate paths that crawl considers for archiving: files
named `.env` or `.env.<suffix>` anywhere below a directory. Dependency
caches (`node_modules`) are pruned and never descended into.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

EXCLUDED_DIRS = frozenset({"node_modules"})


def is_env_file_name(name: str) -> bool:
    """Check whether a file name looks like an environment file."""
    return name == ".env" or name.startswith(".env.")


def search_env_files(directory: str | Path) -> list[Path]:
    """Find environment files below a directory.

    Args:
        directory: Root of the search

    Returns:
        Sorted list of matching file paths

    Raises:
        FileNotFoundError: If the directory does not exist
        NotADirectoryError: If the path is not a directory
    """
    root = Path(directory)
    if not root.exists():
        raise FileNotFoundError(f"Directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    def _raise(error: OSError) -> None:
        raise error

    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        # Prune in place so os.walk skips them
        dirnames[:] = [d for d in dirnames if d not in EXCLUDED_DIRS]
        for filename in filenames:
            if is_env_file_name(filename):
                candidate = Path(dirpath) / filename
                if candidate.is_file():
                    found.append(candidate)

    logger.debug(f"Found {len(found)} env files under {root}")
    return sorted(found)
