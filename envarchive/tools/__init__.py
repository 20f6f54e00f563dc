"""
Workflow tools for envarchive.

This module provides the two stateful workflows built on the store:
- crawl: Archive changed env files under a directory
- recover: Restore a named snapshot, backing up conflicting local files

Invariants:
    - Tools run sequentially; one store operation at a time
    - The first failure is propagated to the caller
"""

from .crawl import CrawlAction, Crawler, CrawlRecord, CrawlResult
from .recover import RecoverOutcome, RecoverResult, RecoveryTool

__all__ = [
    "CrawlAction",
    "Crawler",
    "CrawlRecord",
    "CrawlResult",
    "RecoverOutcome",
    "RecoverResult",
    "RecoveryTool",
]
