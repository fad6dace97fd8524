"""
Storage adapters for Insta-Relief hexagonal architecture.

This module contains aiosqlite-backed implementations of the document
store collections: users, processed-alert markers and catastrophes.
"""

from .sqlite_users import SQLiteUserStore
from .sqlite_markers import SQLiteMarkerStore
from .sqlite_catastrophes import SQLiteCatastropheStore

__all__ = ["SQLiteUserStore", "SQLiteMarkerStore", "SQLiteCatastropheStore"]
