"""
Business services for the Jobboard ATS.

This module contains the adapters the core uses to talk to external
collaborators.
"""

from jobboard_ats.services.notifications import (
    DeliveryResult,
    LoggingNotificationSender,
    Notification,
    NotificationSender,
    dispatch_safely,
)

__all__ = [
    "DeliveryResult",
    "LoggingNotificationSender",
    "Notification",
    "NotificationSender",
    "dispatch_safely",
]
