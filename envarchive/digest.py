"""
Content digests for archived files.

Checksums drive both change detection during crawl and the
skip/backup decision during recovery, so they must depend on the file
bytes only.

Invariants:
    - Identical byte content always yields the identical hex string
    - Read errors propagate; a missing digest is never returned silently
"""

from __future__ import annotations

import hashlib
from pathlib import Path

CHUNK_SIZE = 1024


def file_checksum(file_path: str | Path) -> str:
    """Compute the SHA-256 hex digest of a file.

    The file is read through a buffered stream in CHUNK_SIZE pieces.

    Args:
        file_path: File to digest

    Returns:
        Hex-encoded SHA-256 digest

    Raises:
        OSError: If the file cannot be opened or read
    """
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def bytes_checksum(data: bytes) -> str:
    """Compute the SHA-256 hex digest of an in-memory buffer."""
    return hashlib.sha256(data).hexdigest()
