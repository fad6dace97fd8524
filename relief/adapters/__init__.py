"""
Adapters for Insta-Relief hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .storage import SQLiteUserStore, SQLiteMarkerStore, SQLiteCatastropheStore
from .weather.client import NoaaAlertFeed
from .mail.client import Smtp2goMailer

__all__ = ["SQLiteUserStore", "SQLiteMarkerStore", "SQLiteCatastropheStore", "NoaaAlertFeed", "Smtp2goMailer"]
