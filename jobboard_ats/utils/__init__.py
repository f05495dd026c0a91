"""
Utility modules for the Jobboard ATS.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Application-wide constants
"""

from jobboard_ats.utils.config import (
    AppSettings,
    get_settings,
    reload_settings,
    ROOT_DIR,
    LOGS_DIR,
)
from jobboard_ats.utils.constants import (
    APP_NAME,
    APP_DISPLAY_NAME,
    VERSION,
    AlertFrequency,
    ApplicationStatus,
    AuditAction,
    AuditEntityType,
    InteractionOrigin,
    JobType,
    NotificationEvent,
    UserRole,
)
from jobboard_ats.utils.logger import (
    setup_logging,
    get_logger,
    log_security_event,
    sanitize_for_logging,
    LoggerMixin,
    log,
)

__all__ = [
    # Config
    "AppSettings",
    "get_settings",
    "reload_settings",
    "ROOT_DIR",
    "LOGS_DIR",
    # Constants
    "APP_NAME",
    "APP_DISPLAY_NAME",
    "VERSION",
    "AlertFrequency",
    "ApplicationStatus",
    "AuditAction",
    "AuditEntityType",
    "InteractionOrigin",
    "JobType",
    "NotificationEvent",
    "UserRole",
    # Logger
    "setup_logging",
    "get_logger",
    "log_security_event",
    "sanitize_for_logging",
    "LoggerMixin",
    "log",
]
