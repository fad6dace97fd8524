"""
Orchestrators for Insta-Relief.

This module contains the orchestrators that coordinate
the flow between ports and adapters.
"""
from .dispatcher import NotificationDispatcher
from .ingestion import AlertIngestor, IngestionScheduler
from .simulation import DisasterSimulator
from .admin import AdminTools

__all__ = ["NotificationDispatcher", "AlertIngestor", "IngestionScheduler", "DisasterSimulator", "AdminTools"]
