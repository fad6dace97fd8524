"""
Core domain models and pure functions for Insta-Relief.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import (
    Alert, Catastrophe, DispatchOutcome, EmailMessage, IngestResult,
    ProcessedAlertMarker, SimulationResult, User, UserStatus,
)
from .normalize import to_alert
from .policy import should_payout, can_receive_alert
from .zipmap import ZipLookup

__all__ = [
    "Alert", "Catastrophe", "DispatchOutcome", "EmailMessage", "IngestResult",
    "ProcessedAlertMarker", "SimulationResult", "User", "UserStatus",
    "to_alert", "should_payout", "can_receive_alert", "ZipLookup",
]
