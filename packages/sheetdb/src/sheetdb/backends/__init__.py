"""Concrete store implementations for sheetdb."""

from __future__ import annotations

from sheetdb.backends.sqlite import MEMORY, Destination, SQLiteStore, open_store

__all__ = [
    "MEMORY",
    "Destination",
    "SQLiteStore",
    "open_store",
]
