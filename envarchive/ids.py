"""
Generated archive names.

Entries pushed without an explicit name (crawl, recovery backups, push
without --name) are named with a ULID. ULIDs sort lexicographically in
creation order, so default-named entries stay time-ordered when sorted
by name alone.

Invariants:
    - Names from one generator are strictly increasing, even when several
      are produced within the same millisecond
    - Names are 26-character Crockford base32 strings
"""

from __future__ import annotations

import threading

from ulid import ULID


class NameGenerator:
    """Monotonic ULID name source.

    A plain ULID only orders by its millisecond timestamp; two ULIDs
    created in the same millisecond order by their random part. The
    generator bumps the previous value by one in that case.

    Example:
        >>> gen = NameGenerator()
        >>> a, b = gen(), gen()
        >>> a < b
        True
    """

    def __init__(self) -> None:
        self._last: ULID | None = None
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            candidate = ULID()
            if self._last is not None and int(candidate) <= int(self._last):
                candidate = ULID.from_int(int(self._last) + 1)
            self._last = candidate
            return str(candidate)


_default_generator = NameGenerator()


def generate_name() -> str:
    """Return a fresh process-wide monotonic ULID name."""
    return _default_generator()
