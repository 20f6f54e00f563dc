"""
Entry point for running envarchive as a module.

Usage:
    python -m envarchive list-all
"""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
