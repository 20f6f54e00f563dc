"""
envarchive test suite.

This package contains:
- unit/: Unit tests (digest, ids, discovery, store, config, errors)
- integration/: Crawl, recovery and CLI flows against a real SQLite file
"""
