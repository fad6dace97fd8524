"""
Port interfaces for Insta-Relief hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external adapters.
"""

from .feed import AlertFeedPort
from .mail import MailSenderPort
from .store import UserStorePort, MarkerStorePort, CatastropheStorePort

__all__ = ["AlertFeedPort", "MailSenderPort", "UserStorePort", "MarkerStorePort", "CatastropheStorePort"]
